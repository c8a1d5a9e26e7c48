"""High-level interfaces binding requests to the flow algorithms.

`compute_flow` runs a `FlowRequest` against a `CapacityGraph` without
mutating it; `compute_flow_from_config` first builds the graph from trust and
balance records.
"""
