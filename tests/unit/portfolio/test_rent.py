"""Tests for RentCalculator and the NFT burn-value bound."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from solfolio.exceptions import NetworkError
from solfolio.portfolio.rent import NFTRent, RentCalculator, local_rent_exemption


@pytest.fixture()
def rpc():
    client = MagicMock()
    client.get_minimum_balance_for_rent_exemption = AsyncMock(side_effect=lambda size: local_rent_exemption(size))
    return client


class TestLocalRentExemption:
    def test_token_account(self):
        assert local_rent_exemption(165) == 2039280

    def test_formula(self):
        assert local_rent_exemption(0) == 128 * 3480 * 2


class TestRentCalculator:
    async def test_memoized_per_size(self, rpc):
        calc = RentCalculator(rpc)
        await calc.account_rent(165)
        await calc.account_rent(165)
        assert rpc.get_minimum_balance_for_rent_exemption.await_count == 1

    async def test_falls_back_to_local_formula(self, rpc):
        rpc.get_minimum_balance_for_rent_exemption.side_effect = NetworkError("down")
        calc = RentCalculator(rpc)
        assert await calc.account_rent(679) == local_rent_exemption(679)

    async def test_fallback_memoized(self, rpc):
        rpc.get_minimum_balance_for_rent_exemption.side_effect = NetworkError("down")
        calc = RentCalculator(rpc)
        await calc.account_rent(100)
        assert await calc.account_rent(100) == local_rent_exemption(100)
        assert rpc.get_minimum_balance_for_rent_exemption.await_count == 1

    async def test_many_nfts_after_failure_query_once_per_size(self, rpc):
        rpc.get_minimum_balance_for_rent_exemption.side_effect = NetworkError("down")
        calc = RentCalculator(rpc)
        for _ in range(50):
            rent = await calc.nft_rent()
        assert rent.token_account == 2039280
        assert rpc.get_minimum_balance_for_rent_exemption.await_count == 3

    async def test_nft_rent(self, rpc):
        rent = await RentCalculator(rpc).nft_rent()
        assert rent.token_account == 2039280
        assert rent.metadata == local_rent_exemption(679)
        assert rent.edition == local_rent_exemption(241)


class TestNFTRent:
    @pytest.mark.parametrize("token,metadata,edition", [(2039280, 5616720, 2568240), (1, 0, 0), (0, 0, 0)])
    def test_burn_value_bound(self, token, metadata, edition):
        rent = NFTRent(token_account=token, metadata=metadata, edition=edition)
        assert rent.burn_value <= rent.accounts_rent
        assert rent.burn_value == rent.rent_exempt

    def test_sol_units(self):
        rent = NFTRent(token_account=2039280, metadata=0, edition=0)
        assert rent.burn_value == pytest.approx(0.00203928)
