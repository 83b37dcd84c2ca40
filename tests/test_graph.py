import hashlib
import logging
import unittest

import pytest
from pytoniq_core import begin_cell

from errors import ConfigurationError, InvalidTransactionError
from txgraph.address import AddressMap, str_address
from txgraph.codes import EXCESSES_OP, STD_FT_OP_CODES, TVM_EXIT_CODES, to_graph_map
from txgraph.graph import TransactionGraph, create_md_graph
from txgraph.transaction import Transaction

TON = 1_000_000_000


def _uint_cell(value):
    return begin_cell().store_uint(value, 32).end_cell()


def _balance_parser(cell):
    return {"balance": cell.begin_parse().load_uint(32)}


@pytest.fixture()
def labels(addresses):
    alice, bob, carol = addresses
    return AddressMap([(alice, "Alice"), (bob, "Bob"), (carol, "Carol")])


@pytest.fixture()
def ping_pong(addresses):
    alice, bob, _ = addresses
    return [
        Transaction(to=alice, sender=None, value=0, op=None),
        Transaction(to=bob, sender=alice, value=TON, total_fees=0, op=0x1, exit_code=0),
        Transaction(to=alice, sender=bob, value=TON // 2, total_fees=0, op=EXCESSES_OP, exit_code=0),
    ]


def test_two_party_trace_renders_expected_graph(ping_pong, labels):
    graph = TransactionGraph(address_map=labels)
    out = graph.render(ping_pong)
    assert out == (
        "```mermaid\nflowchart TB\n"
        '\tA0["Alice"]\n'
        '\tA1["Bob"]\n'
        "\n"
        "\tA0 --> |index: 0<br/>value: 1<br/>fees: 0<br/>op: 0x1| A1\n"
        "\tA1 -.-> |index: 1<br/>value: 0.5<br/>fees: 0<br/>op: 0xd53276db| A0\n"
        "\n"
        "\tlinkStyle 0 stroke:#ff4747,color:#ff4747\n"
        "\tlinkStyle 1 stroke:#0400f0,color:#0400f0\n"
        "\n```\n"
    )


def test_render_is_idempotent(ping_pong, labels):
    graph = TransactionGraph(address_map=labels)
    assert graph.render(ping_pong) == graph.render(ping_pong)


def test_external_deploy_then_transfer_example(addresses):
    x, y, _ = addresses
    txs = [
        Transaction(to=x, sender=None, deploy=True),
        Transaction(to=y, sender=x, value=TON, op=0x1),
    ]
    out = TransactionGraph(display_index=False).render(txs)
    assert f'\tA0["{str_address(x)}"]\n\tA1["{str_address(y)}"]\n\n' in out
    assert "\tA0 --> |value: 1<br/>op: 0x1| A1\n" in out
    assert out == TransactionGraph(display_index=False).render(txs)


def test_show_origin_adds_external_node(ping_pong, labels):
    out = TransactionGraph(address_map=labels).render(ping_pong, overrides={"show_origin": True})
    assert '\tA0["external"]\n\tA1["Alice"]\n\tA2["Bob"]\n' in out
    assert "\tA0 --> |index: 0<br/>value: 0| A1\n" in out
    assert "linkStyle 2 " in out


def test_backward_edge_color_without_excess(addresses, labels):
    alice, bob, _ = addresses
    txs = [
        Transaction(to=bob, sender=alice, op=0x2),
        Transaction(to=alice, sender=bob, op=0x3),
    ]
    out = TransactionGraph(address_map=labels, display_index=False).render(txs)
    assert "\tA1 -.-> |op: 0x3| A0\n" in out
    assert "\tlinkStyle 1 stroke:#02dbdb,color:#02dbdb\n" in out


def test_disable_styles_and_chart_type(ping_pong, labels):
    out = TransactionGraph(address_map=labels).render(ping_pong, overrides={"disable_styles": True, "chart_type": "LR"})
    assert out.startswith("```mermaid\nflowchart LR\n")
    assert "linkStyle" not in out


def test_unidirectional_gives_each_destination_a_node(ping_pong, labels):
    out = TransactionGraph(address_map=labels, direction_type="unidirectional").render(ping_pong)
    assert '\tA2["Alice"]\n' in out
    assert "\tA1 --> |" in out


def test_dict_transactions_are_accepted(addresses, labels):
    alice, bob, _ = addresses
    txs = [{"from": str_address(alice), "to": str_address(bob), "value": "2000000000", "totalFees": 10}]
    out = TransactionGraph(address_map=labels).render(txs)
    assert "|index: 0<br/>value: 2<br/>fees: 0.00000001| A1" in out


def test_fee_details_and_error_names(addresses, labels):
    alice, bob, _ = addresses
    tx = Transaction(
        to=bob,
        sender=alice,
        total_fees=3000,
        compute_fee=1000,
        storage_fee=0,
        exit_code=TVM_EXIT_CODES["notEnoughTon"],
        action_result_code=0,
    )
    graph = TransactionGraph(address_map=labels, err_map=to_graph_map(TVM_EXIT_CODES))
    out = graph.render([tx], overrides={"fee_details": {"compute_fee": True, "storage_fee": True}})
    assert "totalFee: 0.000003<br/>computeFee: 0.000001<br/>exit: not_enough_ton|" in out
    assert "storageFee" not in out

    shown = graph.render([tx], overrides={"hide_ok_values": False, "display_fees": False, "display_success": True})
    assert "exit: not_enough_ton<br/>action: 0|" in shown
    assert "abort" not in shown


def test_op_names_and_captions(addresses, labels):
    alice, bob, _ = addresses
    op = STD_FT_OP_CODES["internalTransfer"]
    body = begin_cell().store_uint(op, 32).store_uint(0, 64).store_coins(5 * TON).end_cell()
    tx = Transaction(to=bob, sender=alice, op=op, body=body)
    out = TransactionGraph(address_map=labels, op_map=to_graph_map(STD_FT_OP_CODES)).render([tx])
    assert "|index: 0<br/>op: internal_transfer<br/>amount: 5|" in out

    hidden = TransactionGraph(address_map=labels, display_details=False).render([tx])
    assert "amount" not in hidden


def test_broken_caption_payload_is_tolerated(addresses, labels, caplog):
    alice, bob, _ = addresses
    op = STD_FT_OP_CODES["internalTransfer"]
    tx = Transaction(to=bob, sender=alice, op=op, body=begin_cell().store_uint(op, 32).end_cell())
    with caplog.at_level(logging.WARNING, logger="txgraph.graph"):
        out = TransactionGraph(address_map=labels).render([tx])
    assert "|index: 0<br/>op: 0x178d4519| A1" in out
    assert "Caption handler" in caplog.text


def test_truncated_notification_still_shows_amount(addresses, labels, caplog):
    alice, bob, _ = addresses
    op = STD_FT_OP_CODES["transferNotification"]
    body = begin_cell().store_uint(op, 32).store_uint(0, 64).store_coins(5 * TON).end_cell()
    tx = Transaction(to=bob, sender=alice, op=op, body=body)
    with caplog.at_level(logging.WARNING, logger="txgraph.graph"):
        out = TransactionGraph(address_map=labels).render([tx])
    assert "|index: 0<br/>op: 0x7362d09c<br/>amount: 5| A1" in out
    assert "Caption handler" not in caplog.text


def test_float_storage_change_has_no_delta(addresses, labels):
    alice, bob, _ = addresses
    values = {1: 0.0, 2: 1e16}
    tx = Transaction(to=bob, sender=alice, old_storage=_uint_cell(1), new_storage=_uint_cell(2))
    graph = TransactionGraph(
        address_map=labels,
        storage_map=[(bob, lambda cell: {"rate": values[cell.begin_parse().load_uint(32)]})],
    )
    out = graph.render([tx])
    assert "1e_" not in out
    assert '<span style="color:#E700FF">1e+16</span> | - |' in out


def test_transaction_without_destination_is_rejected(addresses):
    with pytest.raises(InvalidTransactionError):
        TransactionGraph().render([{"from": str_address(addresses[0]), "value": 1}])


def test_storage_difference_table(addresses, labels):
    alice, bob, _ = addresses
    tx = Transaction(to=bob, sender=alice, old_storage=_uint_cell(100), new_storage=_uint_cell(70))
    graph = TransactionGraph(address_map=labels, storage_map=[(bob, _balance_parser)], table_info="simple")
    out = graph.render([tx])

    assert "# Storage Tables (difference)\n\n## Index: 0\n\n`Alice` **--->** `Bob`\n\n" in out
    assert "| Name | Before | After | Diff |\n| --- | --- | --- | --- |\n" in out
    assert (
        '| `balance` | <span style="color:#B0A104">100</span> | <span style="color:#B0A104">70</span> '
        '| <span style="color:#F70B14">-30</span> |\n\n'
    ) in out


def test_storage_table_with_mermaid_info(addresses, labels):
    alice, bob, _ = addresses
    tx = Transaction(to=bob, sender=alice, op=0x5, old_storage=_uint_cell(1), new_storage=_uint_cell(2))
    out = TransactionGraph(address_map=labels, storage_map=[(bob, _balance_parser)]).render([tx])
    assert (
        "## Index: 0\n\n```mermaid\nflowchart LR\n"
        '\tA0["Alice"]\n\tA1["Bob"]\n\n'
        "\tA0 --> |index: 0<br/>op: 0x5| A1\n\n"
        "\tlinkStyle 0 stroke:#ff4747,color:#ff4747\n\n```\n\n\n"
    ) in out


def test_full_storage_mode_and_plain_colors(addresses, labels):
    alice, bob, _ = addresses
    tx = Transaction(to=bob, sender=alice, old_storage=_uint_cell(5), new_storage=_uint_cell(5))
    graph = TransactionGraph(address_map=labels, storage_map=[(bob, _balance_parser)], color_table=False)
    out = graph.render([tx], overrides={"display_storage": "full"})
    assert "# Storage Tables (full)" in out
    assert "| `balance` | 5 | 5 | - |" in out

    # unchanged storage still gets an empty table
    assert "NO DATA" in graph.render([tx])


def test_storage_skipped_without_parser_or_sender(addresses, labels):
    alice, bob, _ = addresses
    no_parser = Transaction(to=alice, sender=bob, old_storage=_uint_cell(1), new_storage=_uint_cell(2))
    external = Transaction(to=bob, sender=None, old_storage=_uint_cell(1), new_storage=_uint_cell(2))
    graph = TransactionGraph(address_map=labels, storage_map=[(bob, _balance_parser)], show_origin=True)
    assert "Storage Tables" not in graph.render([no_parser, external])
    assert "Storage Tables" not in graph.render([no_parser], overrides={"display_storage": False})


def test_missing_storage_side_is_undefined(addresses, labels):
    alice, bob, _ = addresses
    tx = Transaction(to=bob, sender=alice, new_storage=_uint_cell(9))
    out = TransactionGraph(address_map=labels, storage_map=[(bob, _balance_parser)], color_table=False).render([tx])
    assert "| `balance` | undef | 9 | - |" in out


def test_failing_storage_parser_is_tolerated(addresses, labels, caplog):
    alice, bob, _ = addresses

    def broken(_cell):
        raise ValueError("bad layout")

    tx = Transaction(to=bob, sender=alice, old_storage=_uint_cell(1), new_storage=_uint_cell(2))
    with caplog.at_level(logging.WARNING, logger="txgraph.graph"):
        out = TransactionGraph(address_map=labels, storage_map=[(bob, broken)]).render([tx])
    assert "Storage Tables" not in out
    assert "\tA0 --> |index: 0| A1\n" in out
    assert "bad layout" in caplog.text


def test_long_values_are_hashed(addresses, labels):
    alice, bob, _ = addresses
    old, new = "x" * 200, "y" * 200
    values = {1: old, 2: new}
    tx = Transaction(to=bob, sender=alice, old_storage=_uint_cell(1), new_storage=_uint_cell(2))
    graph = TransactionGraph(
        address_map=labels,
        storage_map=[(bob, lambda cell: {"blob": values[cell.begin_parse().load_uint(32)]})],
        color_table=False,
    )
    graph.table_len = None
    out = graph.render([tx])
    assert "sha256: " + hashlib.sha256(old.encode()).hexdigest() in out
    assert "sha256: " + hashlib.sha256(new.encode()).hexdigest() in out

    graph.hash_function = "blake3"
    assert "blake3: " in graph.render([tx])


def test_render_writes_markdown_file(tmp_path, ping_pong, labels):
    folder = tmp_path / "out"
    graph = TransactionGraph(address_map=labels, folder=str(folder))
    out = graph.render(ping_pong, "trace")
    assert (folder / "trace.md").read_text(encoding="utf-8") == out


def test_create_md_graph(tmp_path, ping_pong, labels):
    target = tmp_path / "nested" / "graph.md"
    out = create_md_graph(ping_pong, output=str(target), address_map=labels, display_tokens=False)
    assert target.read_text(encoding="utf-8") == out


class TestGraphProperties(unittest.TestCase):
    def test_defaults(self):
        graph = TransactionGraph()
        self.assertEqual(graph.table_len, 48)
        self.assertEqual(graph.max_display_len, 150)
        self.assertEqual(graph.hash_function.label, "sha256")

    def test_length_validation(self):
        graph = TransactionGraph()
        with self.assertRaises(ConfigurationError):
            graph.table_len = 5
        with self.assertRaises(ConfigurationError):
            graph.max_display_len = 20
        graph.max_display_len = 48
        self.assertEqual(graph.max_display_len, 48)

    def test_unknown_hash_function(self):
        graph = TransactionGraph()
        with self.assertRaises(ConfigurationError):
            graph.hash_function = "nope"

    def test_invalid_instance_options_fail_fast(self):
        with self.assertRaises(ConfigurationError):
            TransactionGraph(chart_type="diagonal")

    def test_overrides_do_not_leak_between_renders(self):
        graph = TransactionGraph(chart_type="LR")
        self.assertEqual(graph.resolve_options({"chart_type": "RL"}).chart_type, "RL")
        self.assertEqual(graph.resolve_options().chart_type, "LR")
        self.assertEqual(graph.defaults, {"chart_type": "LR"})
