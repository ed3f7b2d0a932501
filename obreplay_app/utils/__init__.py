"""
Utility functions module.

Timestamp interpretation shared by the replay query surface and the
command line. Snapshot timestamps stay raw strings in the dataset; parsing
happens only when a derived value such as latency is requested.
"""
