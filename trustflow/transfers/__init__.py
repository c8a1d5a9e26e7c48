"""Post-processing of raw flows into executable transfer lists.

Pruning and transfer-count reduction (`prune`), cycle cancellation and
extraction (`extract`), chain merging (`simplify`), dependency ordering
(`ordering`), validation (`verify`) and the combined `pipeline`.
"""
