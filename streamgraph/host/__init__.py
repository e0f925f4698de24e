"""Host side of the pipeline: driving a graph and collecting its output.

Example:
    >>> from streamgraph.host import Host
    >>> with Host() as host:
    ...     host.set_graph("<sum,_>")
    ...     host.configure(rate=100.0, width=1)
    ...     host.push(0.0, [1.0])
"""

from .host import Diagnostic, Host
from .receiver import RecordingReceiver


__all__ = [
    "Host",
    "Diagnostic",
    "RecordingReceiver",
]
