"""
fanout - run a command once per input line on a fixed-size worker pool.

Usage:
    fanout -t 8 -f inputs.txt gzip -9 {}
"""

__version__ = "0.2.0"
