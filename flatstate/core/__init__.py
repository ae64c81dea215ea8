"""
Core package: states, transitions and the automaton.

Architecture:
- States and transitions are immutable and compared by identity
- AutomatonBuilder validates references while the graph is assembled
- Automaton owns the current state and dispatches posted events
"""
