"""Tests for wallet address validation."""

import pytest

from memesense.core.errors import ValidationError
from memesense.core.validator import is_valid_wallet_address, validate_wallet_address


class TestValidateWalletAddress:

    def test_valid_address_passes(self, sample_wallet_address):
        assert validate_wallet_address(sample_wallet_address) == sample_wallet_address

    def test_surrounding_whitespace_is_stripped(self, wrapped_sol_address):
        assert validate_wallet_address(f"  {wrapped_sol_address}\n") == wrapped_sol_address

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_address(self, value):
        with pytest.raises(ValidationError, match="Wallet address is required"):
            validate_wallet_address(value)

    @pytest.mark.parametrize("value", [
        "short",
        "0xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU",  # '0' is not base58
        "OxKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU",  # 'O' is not base58
        "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU7xK",  # 47 chars
        12345,
        ["So11111111111111111111111111111111111111112"],
    ])
    def test_malformed_address(self, value):
        with pytest.raises(ValidationError, match="Invalid Solana wallet address format"):
            validate_wallet_address(value)

    def test_validation_error_maps_to_400(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_wallet_address("short")
        assert exc_info.value.status_code == 400


def test_is_valid_wallet_address(sample_wallet_address):
    assert is_valid_wallet_address(sample_wallet_address)
    assert not is_valid_wallet_address("short")
    assert not is_valid_wallet_address(None)
