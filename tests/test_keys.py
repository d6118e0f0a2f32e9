import unittest

from tronconsole.contracts import trc20
from tronconsole.core.errors import ContractArtifactError, ValidationError
from tronconsole.tron import keys

USDT = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"
USDT_HEX = "41a614f803b6fd780986a42c78ec9c7f77e6ded13c"


class KeyTests(unittest.TestCase):
    def test_generated_key_derives_valid_address(self) -> None:
        pk = keys.generate_private_key()
        address = keys.private_key_to_address(pk)

        self.assertTrue(keys.is_private_key(pk))
        self.assertTrue(address.startswith("T"))
        self.assertEqual(len(address), 34)
        self.assertTrue(keys.is_address(address))

    def test_derivation_is_deterministic(self) -> None:
        pk = keys.generate_private_key()
        self.assertEqual(keys.private_key_to_address(pk), keys.private_key_to_address(pk.upper()))

    def test_rejects_malformed_private_key(self) -> None:
        with self.assertRaises(ValidationError):
            keys.private_key_to_address("abc")
        self.assertFalse(keys.is_private_key("zz" * 32))

    def test_hex_and_base58_forms(self) -> None:
        self.assertEqual(keys.to_hex_address(USDT), USDT_HEX)
        self.assertEqual(keys.to_base58_address(USDT_HEX), USDT)
        self.assertEqual(keys.to_base58_address("0x" + USDT_HEX[2:]), USDT)
        self.assertEqual(keys.to_abi_address(USDT), "0x" + USDT_HEX[2:])

    def test_is_address_rejects_bad_checksum(self) -> None:
        self.assertFalse(keys.is_address(USDT[:-1] + "u"))
        self.assertFalse(keys.is_address("0x" + USDT_HEX))
        self.assertFalse(keys.is_address(""))

    def test_sign_txid_is_65_bytes(self) -> None:
        sig = keys.sign_txid("ab" * 32, keys.generate_private_key())
        self.assertEqual(len(bytes.fromhex(sig)), 65)

    def test_same_address_ignores_case(self) -> None:
        self.assertTrue(keys.same_address(USDT, USDT.lower()))
        self.assertFalse(keys.same_address(USDT, None))


class ContractArtifactTests(unittest.TestCase):
    def test_missing_bytecode_explains_how_to_compile(self) -> None:
        with self.assertRaises(ContractArtifactError) as ctx:
            trc20.load_bytecode(inline="", path="does/not/exist.bin")
        self.assertIn("not yet compiled", str(ctx.exception))

    def test_inline_bytecode_strips_prefix(self) -> None:
        self.assertEqual(trc20.load_bytecode(inline="0x6080604052"), "6080604052")

    def test_rejects_non_hex(self) -> None:
        with self.assertRaises(ContractArtifactError):
            trc20.load_bytecode(inline="60806g")

    def test_abi_exposes_mint_and_burn(self) -> None:
        names = {item.get("name") for item in trc20.TRC20_ABI}
        self.assertTrue({"mint", "burn", "transfer", "owner", "decimals"} <= names)


if __name__ == "__main__":
    unittest.main()
