"""
Package: delivery
Description: Reliable event delivery for pipeline sinks.

Provides the retry executor, the writer loop driving a transport, and
the bootstrap that starts one worker per sink.
"""
