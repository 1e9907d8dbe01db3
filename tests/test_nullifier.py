"""
Tests for veil_core.nullifier — replay-protection tags.
"""

import random
import unittest

from starknet_py.hash.utils import pedersen_hash

from veil_core.curve import FIELD_PRIME, compress
from veil_core.errors import KeyDomainError
from veil_core.nullifier import (
    NONCE_BITS,
    NullifierDomain,
    generate_domain_nullifier,
    generate_nullifier,
    nonce_from_counter,
    random_nonce,
)

SK = 0x5EC12E7


class TestGenerateNullifier(unittest.TestCase):

    def test_deterministic(self):
        self.assertEqual(generate_nullifier(SK, 1), generate_nullifier(SK, 1))

    def test_distinct_nonces(self):
        self.assertNotEqual(generate_nullifier(SK, 1), generate_nullifier(SK, 2))

    def test_distinct_keys(self):
        self.assertNotEqual(generate_nullifier(SK, 1), generate_nullifier(SK + 1, 1))

    def test_is_h_of_key_and_nonce(self):
        self.assertEqual(generate_nullifier(SK, 9), compress(SK, 9))

    def test_matches_pedersen(self):
        self.assertEqual(generate_nullifier(SK, 9), pedersen_hash(SK, 9))

    def test_reference_vector(self):
        sk = 0x3D937C035C878245CAF64531A5756109C53068DA139362728FEB561405371CB
        nonce = 0x208A0A10250E382E1E4BBE2880906C2791BF6275695E02FBBC6AEFF9CD8B31A
        self.assertEqual(
            generate_nullifier(sk, nonce),
            0x30E480BED5FE53FA909CC0F8C4D99B8F9F2C016BE4C41E13A4848797979C662,
        )

    def test_is_field_element(self):
        self.assertLess(generate_nullifier(SK, 3), FIELD_PRIME)

    def test_many_nonces_unique(self):
        values = {generate_nullifier(SK, n) for n in range(200)}
        self.assertEqual(len(values), 200)

    def test_invalid_key(self):
        with self.assertRaises(KeyDomainError):
            generate_nullifier(0, 1)


class TestDomainNullifier(unittest.TestCase):

    def test_transfer_and_withdraw_differ(self):
        self.assertNotEqual(
            generate_domain_nullifier(SK, 5, "transfer"),
            generate_domain_nullifier(SK, 5, "withdraw"),
        )

    def test_domain_differs_from_plain(self):
        self.assertNotEqual(
            generate_domain_nullifier(SK, 5, NullifierDomain.TRANSFER),
            generate_nullifier(SK, 5),
        )

    def test_chaining(self):
        inner = generate_nullifier(SK, 5)
        self.assertEqual(
            generate_domain_nullifier(SK, 5, NullifierDomain.WITHDRAW), compress(inner, 2)
        )

    def test_enum_name_and_value_agree(self):
        expected = generate_domain_nullifier(SK, 5, NullifierDomain.TRANSFER)
        self.assertEqual(generate_domain_nullifier(SK, 5, "transfer"), expected)
        self.assertEqual(generate_domain_nullifier(SK, 5, "TRANSFER"), expected)
        self.assertEqual(generate_domain_nullifier(SK, 5, 1), expected)

    def test_tags(self):
        self.assertEqual(int(NullifierDomain.TRANSFER), 1)
        self.assertEqual(int(NullifierDomain.WITHDRAW), 2)

    def test_unknown_domain(self):
        with self.assertRaises(ValueError):
            generate_domain_nullifier(SK, 5, "stake")
        with self.assertRaises(ValueError):
            generate_domain_nullifier(SK, 5, 99)

    def test_shared_counter_never_collides(self):
        seen = set()
        for counter in range(50):
            for domain in NullifierDomain:
                seen.add(generate_domain_nullifier(SK, nonce_from_counter(counter), domain))
        self.assertEqual(len(seen), 100)


class TestNonces(unittest.TestCase):

    def test_counter_cast(self):
        self.assertEqual(nonce_from_counter(0), 0)
        self.assertEqual(nonce_from_counter(41), 41)

    def test_negative_counter(self):
        with self.assertRaises(ValueError):
            nonce_from_counter(-1)

    def test_random_nonce_fits(self):
        for _ in range(50):
            n = random_nonce()
            self.assertTrue(0 <= n < 1 << NONCE_BITS)
            self.assertLess(n, FIELD_PRIME)

    def test_random_nonce_injected(self):
        self.assertEqual(random_nonce(random.Random(3)), random_nonce(random.Random(3)))

    def test_random_nonces_differ(self):
        self.assertNotEqual(random_nonce(), random_nonce())


if __name__ == "__main__":
    unittest.main()
