"""com-graph: Consistency engine for automotive network communication models.

This package provides tools for:
- Building a topology graph of clusters, channels, ECUs, frames, PDUs and signals
- Validating bit layouts of PDUs in frames and signals in PDUs
- Keeping frame, PDU and signal triggerings and their ports synchronized
- Validating data transformation chains (COM, SOME/IP, E2E)

Quick Start:
    >>> from com_graph.model import ByteOrder, ClusterKind, CommunicationModel, FrameKind, PduKind
    >>>
    >>> model = CommunicationModel()
    >>> cluster = model.create_cluster("CanCluster", ClusterKind.CAN)
    >>> channel = model.create_physical_channel(cluster, "CanChannel")
    >>> frame = model.create_frame("Frame1", FrameKind.CAN, 8)
    >>> pdu = model.create_pdu("Pdu1", PduKind.ISIGNAL_IPDU, 8)
    >>> model.map_pdu_into_frame(frame, pdu, 0, ByteOrder.MOST_SIGNIFICANT_BYTE_LAST)

Modules:
    model: Topology graph (entities and the CommunicationModel arena)
    layout: Bit-layout validation
    propagation: Triggering and port propagation procedures
    transformation: Data transformation sets, technologies and chains
    validation: Whole-graph consistency audit
    description: Pydantic models and loader for YAML/JSON network descriptions
    cli: Command-line interface
"""

__version__ = "0.1.0"
