from trustflow.transfers.simplify import simplify_transfers
from trustflow.types.dto import Transfer


def test_merges_chains_of_equal_token_and_amount():
    transfers = [
        Transfer("S", "A", "tok", 40),
        Transfer("A", "T", "tok", 40),
        Transfer("S", "B", "tok", 60),
        Transfer("B", "C", "tok", 60),
        Transfer("C", "T", "tok", 60),
    ]
    assert simplify_transfers(transfers) == [
        Transfer("S", "T", "tok", 40),
        Transfer("S", "T", "tok", 60),
    ]


def test_keeps_different_tokens_or_amounts_apart():
    transfers = [
        Transfer("S", "A", "x", 5),
        Transfer("A", "T", "y", 5),
        Transfer("S", "B", "x", 5),
        Transfer("B", "T", "x", 4),
    ]
    assert simplify_transfers(transfers) == transfers


def test_never_creates_self_transfer():
    transfers = [Transfer("A", "B", "t", 3), Transfer("B", "A", "t", 3)]
    assert simplify_transfers(transfers) == transfers


def test_idempotent():
    transfers = [
        Transfer("S", "A", "t", 2),
        Transfer("A", "B", "t", 2),
        Transfer("B", "T", "t", 2),
        Transfer("S", "T", "u", 9),
    ]
    once = simplify_transfers(transfers)

    assert once == [Transfer("S", "T", "t", 2), Transfer("S", "T", "u", 9)]
    assert simplify_transfers(once) == once


def test_input_not_modified():
    transfers = [Transfer("S", "A", "t", 2), Transfer("A", "T", "t", 2)]
    simplify_transfers(transfers)
    assert len(transfers) == 2
