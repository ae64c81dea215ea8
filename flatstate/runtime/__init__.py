"""
Runtime package: executors that schedule automaton work.

Architecture:
- ImmediateExecutor runs work on the calling thread
- SerialExecutor runs work on one worker thread from a WorkQueue
- FuturesExecutor and AsyncioExecutor adapt existing pools and event loops
"""
