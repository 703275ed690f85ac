import pytest

from juliusgov.address import derive_address_from_pk
from juliusgov.password import EncryptionError, PasswordError, SerializationError
from juliusgov.wallet import (
    DEFAULT_WALLET_PATH,
    EncryptedWalletData,
    Wallet,
    WalletData,
    WalletStorage,
)

POLICY_COMPLIANT = "Placeholder1!"


@pytest.fixture
def wallet(tmp_path):
    return Wallet(path=str(tmp_path / "wallet.dat"), mnemonic="abandon ability able")


def test_new_wallet_derives_address(wallet):
    assert wallet.address_hash == derive_address_from_pk(wallet.public_key)
    assert wallet.address().hash == wallet.address_hash
    assert len(wallet.address_hash) == 32


def test_new_wallets_differ():
    wallets = [Wallet() for _ in range(3)]
    assert len({w.public_key for w in wallets}) == 3
    assert len({w.address_hash for w in wallets}) == 3


def test_default_path():
    assert Wallet().path == DEFAULT_WALLET_PATH


def test_wallet_data_wire_format():
    data = WalletData(b"\x01", b"\x02", b"\x03", None)
    assert data.to_bytes() == (
        b"\x01" + bytes(7) + b"\x01"
        + b"\x01" + bytes(7) + b"\x02"
        + b"\x01" + bytes(7) + b"\x03"
        + b"\x00"
    )


def test_wallet_data_round_trip_with_mnemonic():
    data = WalletData(b"pk", b"sk", b"addr", "word list")
    assert WalletData.from_bytes(data.to_bytes()) == data


def test_encrypted_data_round_trip():
    record = EncryptedWalletData(b"s" * 32, b"n" * 12, b"cipher")
    assert EncryptedWalletData.from_bytes(record.to_bytes()) == record


def test_truncated_data_rejected():
    encoded = WalletData(b"pk", b"sk", b"addr", "x").to_bytes()
    with pytest.raises(SerializationError):
        WalletData.from_bytes(encoded[:-1])


def test_bad_option_tag_rejected():
    encoded = WalletData(b"pk", b"sk", b"addr", None).to_bytes()
    with pytest.raises(SerializationError):
        WalletData.from_bytes(encoded[:-1] + b"\x05")


def test_save_and_load(wallet):
    wallet.save()
    loaded = Wallet.load(wallet.path)
    assert loaded == wallet
    assert loaded.mnemonic == "abandon ability able"


def test_storage_load_matches(wallet):
    wallet.save()
    loaded = WalletStorage.load(wallet.path)
    assert loaded.secret_key == wallet.secret_key
    assert WalletStorage.read_wallet_data(wallet.path).address_hash == wallet.address_hash


def test_encrypted_round_trip(wallet):
    wallet.save_encrypted(POLICY_COMPLIANT)
    loaded = Wallet.load_encrypted(wallet.path, POLICY_COMPLIANT)
    assert loaded.public_key == wallet.public_key
    assert loaded.secret_key == wallet.secret_key
    assert loaded.mnemonic == wallet.mnemonic


def test_encrypted_file_hides_secret(wallet, tmp_path):
    wallet.save_encrypted(POLICY_COMPLIANT)
    raw = (tmp_path / "wallet.dat").read_bytes()
    assert wallet.secret_key not in raw
    record = EncryptedWalletData.from_bytes(raw)
    assert len(record.salt) == 32
    assert len(record.nonce) == 12


def test_wrong_password_rejected(wallet):
    wallet.save_encrypted(POLICY_COMPLIANT)
    with pytest.raises(EncryptionError):
        Wallet.load_encrypted(wallet.path, "Placeholder2!")


def test_weak_password_rejected(wallet, tmp_path):
    with pytest.raises(PasswordError):
        wallet.save_encrypted("short")
    assert not (tmp_path / "wallet.dat").exists()


def test_encrypted_file_not_loadable_as_plain(wallet):
    wallet.save_encrypted(POLICY_COMPLIANT)
    with pytest.raises(SerializationError):
        Wallet.load(wallet.path)


def test_backup_and_restore(wallet, tmp_path):
    backup_path = tmp_path / "backup.dat"
    wallet.backup(backup_path)
    restored = Wallet.restore_from_backup(backup_path)
    assert restored.public_key == wallet.public_key
    assert restored.secret_key == wallet.secret_key
    assert restored.mnemonic == wallet.mnemonic
    assert restored.path == DEFAULT_WALLET_PATH


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Wallet.load(tmp_path / "absent.dat")