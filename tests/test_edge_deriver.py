import random
import unittest

from eth_utils import to_checksum_address

from trustgraph.core.dto import RawAccount, RawHolding, RawTrustLimit
from trustgraph.services.edge_deriver import EdgeDeriver, derive_edges
from trustgraph.services.extractor import extract_registry

UNIT = 10**18


def _addr(n: int) -> str:
    return to_checksum_address("0x%040x" % n)


A, B, C, D = _addr(0xA1), _addr(0xB2), _addr(0xC3), _addr(0xD4)
TOKEN_B = _addr(0x7B)     # token contract homed at B
TOKEN_C = _addr(0x7C)     # token contract homed at C


def _edges(records):
    return [
        (e.from_address, e.to_address, e.token, e.capacity)
        for e in derive_edges(extract_registry(records))
    ]


class EdgeDeriverTests(unittest.TestCase):
    def test_holder_gets_ownership_edge_and_transfer_edge_through_home_trust(self) -> None:
        records = [
            RawAccount(address=A, holdings=(RawHolding(TOKEN_B, B, 5 * UNIT),)),
            RawAccount(address=B, outgoing=(RawTrustLimit(B, C, 100 * UNIT),)),
            RawAccount(address=C),
        ]

        self.assertEqual(
            _edges(records),
            [
                (A, B, B, 5),
                (A, C, B, 5),
            ],
        )

    def test_capacity_is_min_of_limit_and_balance(self) -> None:
        records = [
            RawAccount(address=A, holdings=(RawHolding(TOKEN_B, B, 50 * UNIT),)),
            RawAccount(address=B, outgoing=(RawTrustLimit(B, C, 7 * UNIT),)),
        ]

        self.assertIn((A, C, B, 7), _edges(records))
        self.assertIn((A, B, B, 50), _edges(records))

    def test_account_holding_its_own_token_has_no_self_loop(self) -> None:
        records = [
            RawAccount(
                address=B,
                holdings=(RawHolding(TOKEN_B, B, 10 * UNIT),),
                outgoing=(RawTrustLimit(B, C, 3 * UNIT), RawTrustLimit(B, B, 100 * UNIT)),
            ),
        ]

        self.assertEqual(_edges(records), [(B, C, B, 3)])

    def test_zero_limit_connection_never_produces_an_edge(self) -> None:
        records = [
            RawAccount(address=A, holdings=(RawHolding(TOKEN_B, B, 5 * UNIT),)),
            RawAccount(address=B, outgoing=(RawTrustLimit(B, C, 0),)),
        ]

        self.assertEqual(_edges(records), [(A, B, B, 5)])

    def test_capacities_below_one_unit_are_dropped(self) -> None:
        records = [
            RawAccount(address=A, holdings=(RawHolding(TOKEN_B, B, UNIT - 1),)),
            RawAccount(
                address=D,
                holdings=(RawHolding(TOKEN_B, B, 5 * UNIT),),
            ),
            RawAccount(address=B, outgoing=(RawTrustLimit(B, C, UNIT // 2),)),
        ]

        # A's balance and B's limit are both positive but floor to zero
        self.assertEqual(_edges(records), [(D, B, B, 5)])

    def test_capacity_is_floored_with_integer_division(self) -> None:
        records = [
            RawAccount(address=A, holdings=(RawHolding(TOKEN_B, B, 5 * UNIT + UNIT - 1),)),
        ]

        self.assertEqual(_edges(records), [(A, B, B, 5)])

    def test_first_edge_per_key_wins(self) -> None:
        # B -> C trust registered twice (B's outgoing and C's incoming batch)
        records = [
            RawAccount(address=A, holdings=(RawHolding(TOKEN_B, B, 10 * UNIT),)),
            RawAccount(address=B, outgoing=(RawTrustLimit(B, C, 2 * UNIT),)),
            RawAccount(address=C, incoming=(RawTrustLimit(B, C, 4 * UNIT),)),
        ]

        edges = _edges(records)

        self.assertEqual([e for e in edges if e[1] == C], [(A, C, B, 2)])

    def test_repeated_holdings_of_one_token_keep_the_first_edge(self) -> None:
        records = [
            RawAccount(
                address=A,
                holdings=(RawHolding(TOKEN_B, B, 3 * UNIT), RawHolding(TOKEN_B, B, 9 * UNIT)),
            ),
        ]

        self.assertEqual(_edges(records), [(A, B, B, 3)])

    def test_ownership_connections_join_the_working_set(self) -> None:
        # C holds B's token, so the ownership connection C -> B lets holders
        # of C's token reach B as well.
        records = [
            RawAccount(address=A, holdings=(RawHolding(TOKEN_C, C, 8 * UNIT),)),
            RawAccount(address=C, holdings=(RawHolding(TOKEN_B, B, 2 * UNIT),)),
        ]

        self.assertEqual(
            _edges(records),
            [
                (A, C, C, 8),
                (A, B, C, 2),
                (C, B, B, 2),
            ],
        )

    def test_custom_decimals(self) -> None:
        registry = extract_registry(
            [RawAccount(address=A, holdings=(RawHolding(TOKEN_B, B, 1234),))]
        )

        edges = EdgeDeriver(decimals=2).derive(registry)

        self.assertEqual([e.capacity for e in edges], [12])

    def test_derivation_is_deterministic(self) -> None:
        records = _random_network(random.Random(7))

        self.assertEqual(_edges(records), _edges(records))


def _random_network(rng: random.Random, size: int = 12):
    accounts = [_addr(0x1000 + i) for i in range(size)]
    tokens = {a: _addr(0x2000 + i) for i, a in enumerate(accounts)}
    records = []
    for a in accounts:
        holdings = tuple(
            RawHolding(tokens[home], home, rng.choice([0, UNIT // 3, UNIT, 3 * UNIT, 40 * UNIT + 17]))
            for home in rng.sample(accounts, 3)
        )
        outgoing = tuple(
            RawTrustLimit(a, other, rng.choice([0, UNIT // 2, 2 * UNIT, 100 * UNIT]))
            for other in rng.sample(accounts, 4)
        )
        records.append(RawAccount(address=a, holdings=holdings, outgoing=outgoing))
    return records


class EdgeDeriverPropertyTests(unittest.TestCase):
    def test_invariants_hold_on_random_networks(self) -> None:
        for seed in range(10):
            with self.subTest(seed=seed):
                records = _random_network(random.Random(seed))
                registry = extract_registry(records)
                edges = derive_edges(registry)

                keys = [e.key for e in edges]
                self.assertEqual(len(keys), len(set(keys)))

                limits = {}
                for c in registry.connections:
                    limits.setdefault(c.key, []).append(c.limit)

                for e in edges:
                    self.assertNotEqual(e.from_address, e.to_address)
                    self.assertGreater(e.capacity, 0)

                    balances = [
                        balance
                        for token_address, balance in registry.accounts[e.from_address].held_tokens
                        if registry.tokens[token_address].home_account == e.token
                    ]
                    self.assertLessEqual(e.capacity * UNIT, max(balances))

                    if e.to_address != e.token:
                        gate = limits.get((e.token, e.to_address), [])
                        ownership = [
                            balance
                            for token_address, balance in registry.accounts[e.token].held_tokens
                            if registry.tokens[token_address].home_account == e.to_address
                        ] if e.token in registry.accounts else []
                        self.assertLessEqual(e.capacity * UNIT, max(gate + ownership))


if __name__ == "__main__":
    unittest.main()
