"""Path search and max-flow algorithms over `CapacityGraph`.

Modules:
    bfs: breadth-first augmenting path.
    bidirectional: bidirectional breadth-first augmenting path.
    search: strategy dispatch (`find_path`).
    augment: flow placement along a path with used-edge bookkeeping.
    max_flow: direct augmentation and capacity scaling.
"""
