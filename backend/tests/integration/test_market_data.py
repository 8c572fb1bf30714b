"""
Integration Tests - Prices and Charts
PriceService and ChartService with mocked providers and cache.
"""
from decimal import Decimal
import pytest

from app.core.trading.service import TradingService
from app.data_providers.adapters import Quote
from app.services.chart_service import ChartService
from app.services.price_service import PriceService
from app.utils.exceptions import MarketDataUnavailableError, RateLimitExceededError
from tests.factories import create_symbol, create_user

pytestmark = pytest.mark.integration


@pytest.fixture
def prices(db_session, mock_rapidapi, mock_finnhub, mock_redis):
    return PriceService(db_session, mock_rapidapi, mock_finnhub, mock_redis)


class TestCurrentPrice:
    """Tests for single-symbol quotes."""

    @pytest.mark.asyncio
    async def test_fetches_and_caches(self, db_session, prices, mock_rapidapi, mock_redis, sample_quote):
        await create_symbol(db_session, "AAPL")
        mock_rapidapi.get_quote.return_value = sample_quote

        quote = await prices.get_current_price(" aapl")

        assert quote.price == Decimal("178.50")
        mock_rapidapi.get_quote.assert_awaited_once_with("AAPL")
        mock_redis.set_quote.assert_awaited_once_with("AAPL", sample_quote.to_dict())

    @pytest.mark.asyncio
    async def test_cache_hit_skips_provider(self, db_session, prices, mock_rapidapi, mock_redis, sample_quote):
        await create_symbol(db_session, "AAPL")
        mock_redis.get_quote.return_value = sample_quote.to_dict()

        quote = await prices.get_current_price("AAPL")

        assert quote.price == Decimal("178.50")
        mock_rapidapi.get_quote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_and_disabled_symbols(self, db_session, prices, mock_rapidapi):
        await create_symbol(db_session, "TSLA", enabled=False)

        assert await prices.get_current_price("ZZZZ") is None
        assert await prices.get_current_price("TSLA") is None
        mock_rapidapi.get_quote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_quote(self, db_session, prices):
        await create_symbol(db_session, "AAPL")
        assert await prices.get_current_price("AAPL") is None
        assert await prices.get_price_value("AAPL") is None

    @pytest.mark.asyncio
    async def test_rate_limit_propagates(self, db_session, prices, mock_rapidapi):
        await create_symbol(db_session, "AAPL")
        mock_rapidapi.get_quote.side_effect = RateLimitExceededError()

        with pytest.raises(RateLimitExceededError):
            await prices.get_current_price("AAPL")

    @pytest.mark.asyncio
    async def test_works_without_cache(self, db_session, mock_rapidapi, mock_finnhub, sample_quote):
        await create_symbol(db_session, "AAPL")
        mock_rapidapi.get_quote.return_value = sample_quote
        service = PriceService(db_session, mock_rapidapi, mock_finnhub)

        assert await service.get_price_value("AAPL") == Decimal("178.50")


class TestAllPrices:
    """Tests for universe-wide quotes."""

    @pytest.mark.asyncio
    async def test_mixes_cache_and_provider(self, db_session, prices, mock_rapidapi, mock_redis, sample_quote):
        for symbol in ["AAPL", "MSFT", "NVDA"]:
            await create_symbol(db_session, symbol)
        await create_symbol(db_session, "TSLA", enabled=False)
        msft = Quote(symbol="MSFT", price=Decimal("410.25"), provider="rapidapi")
        mock_redis.get_quotes.side_effect = None
        mock_redis.get_quotes.return_value = {"AAPL": sample_quote.to_dict(), "MSFT": None, "NVDA": None}
        mock_rapidapi.get_quotes.return_value = [msft]

        result = await prices.get_all_current_prices()

        assert set(result) == {"AAPL", "MSFT"}
        assert result["MSFT"].price == Decimal("410.25")
        mock_rapidapi.get_quotes.assert_awaited_once_with(["MSFT", "NVDA"])
        mock_redis.set_quote.assert_awaited_once_with("MSFT", msft.to_dict())

    @pytest.mark.asyncio
    async def test_empty_universe(self, prices, mock_rapidapi):
        assert await prices.get_all_current_prices() == {}
        mock_rapidapi.get_quotes.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_last_quote_from_finnhub(self, prices, mock_finnhub, sample_quote):
        mock_finnhub.get_quote.return_value = sample_quote

        assert await prices.get_last_quote("aapl") is sample_quote
        mock_finnhub.get_quote.assert_awaited_once_with("AAPL")


class TestPricesFor:
    """Tests for valuation prices over a set of holdings."""

    @pytest.mark.asyncio
    async def test_prices_for_omits_unquoted(self, db_session, prices, mock_rapidapi, sample_quote):
        await create_symbol(db_session, "AAPL")
        await create_symbol(db_session, "MSFT")
        mock_rapidapi.get_quotes.return_value = [sample_quote]

        assert await prices.get_prices_for(["AAPL", "MSFT"]) == {"AAPL": Decimal("178.50")}

    @pytest.mark.asyncio
    async def test_one_batched_request_for_uncached(self, db_session, prices, mock_rapidapi, mock_redis, sample_quote):
        for symbol in ["AAPL", "MSFT", "NVDA"]:
            await create_symbol(db_session, symbol)
        msft = Quote(symbol="MSFT", price=Decimal("410.25"), provider="rapidapi")
        mock_redis.get_quotes.side_effect = None
        mock_redis.get_quotes.return_value = {"AAPL": sample_quote.to_dict(), "MSFT": None, "NVDA": None}
        mock_rapidapi.get_quotes.return_value = [msft]

        result = await prices.get_prices_for(["AAPL", "MSFT", "NVDA"])

        assert result == {"AAPL": Decimal("178.50"), "MSFT": Decimal("410.25")}
        mock_rapidapi.get_quotes.assert_awaited_once_with(["MSFT", "NVDA"])
        mock_rapidapi.get_quote.assert_not_awaited()
        mock_redis.set_quote.assert_awaited_once_with("MSFT", msft.to_dict())

    @pytest.mark.asyncio
    async def test_disabled_and_unknown_are_not_requested(self, db_session, prices, mock_rapidapi):
        await create_symbol(db_session, "AAPL")
        await create_symbol(db_session, "TSLA", enabled=False)

        await prices.get_prices_for(["AAPL", "TSLA", "ZZZZ"])

        mock_rapidapi.get_quotes.assert_awaited_once_with(["AAPL"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [RateLimitExceededError(), MarketDataUnavailableError("upstream 502")])
    async def test_provider_failure_keeps_cached_prices(self, db_session, prices, mock_rapidapi, mock_redis, sample_quote, error):
        await create_symbol(db_session, "AAPL")
        await create_symbol(db_session, "MSFT")
        mock_redis.get_quotes.side_effect = None
        mock_redis.get_quotes.return_value = {"AAPL": sample_quote.to_dict(), "MSFT": None}
        mock_rapidapi.get_quotes.side_effect = error

        assert await prices.get_prices_for(["AAPL", "MSFT"]) == {"AAPL": Decimal("178.50")}

    @pytest.mark.asyncio
    async def test_nothing_enabled_makes_no_request(self, prices, mock_rapidapi, mock_redis):
        assert await prices.get_prices_for(["AAPL"]) == {}
        mock_rapidapi.get_quotes.assert_not_awaited()
        mock_redis.get_quotes.assert_not_awaited()


class TestCharts:
    """Tests for held-symbol charts."""

    @pytest.mark.asyncio
    async def test_one_chart_per_holding(self, db_session, mock_rapidapi, fake_prices):
        await create_symbol(db_session, "AAPL")
        await create_symbol(db_session, "MSFT")
        user = await create_user(db_session, "alice")
        trading = TradingService(db_session, fake_prices)
        await trading.buy(user.id, "MSFT", 1)
        await trading.buy(user.id, "AAPL", 1)

        charts = await ChartService(db_session, mock_rapidapi).get_charts(user.id, "5d")

        assert charts == [{"symbol": "AAPL", "range": "5d"}, {"symbol": "MSFT", "range": "5d"}]

    @pytest.mark.asyncio
    async def test_failed_chart_skipped(self, db_session, mock_rapidapi, fake_prices):
        await create_symbol(db_session, "AAPL")
        await create_symbol(db_session, "MSFT")
        user = await create_user(db_session, "alice")
        trading = TradingService(db_session, fake_prices)
        await trading.buy(user.id, "AAPL", 1)
        await trading.buy(user.id, "MSFT", 1)

        def chart(symbol, range_="1d"):
            if symbol == "AAPL":
                raise MarketDataUnavailableError("rapidapi")
            return {"symbol": symbol}
        mock_rapidapi.get_chart.side_effect = chart

        charts = await ChartService(db_session, mock_rapidapi).get_charts(user.id)

        assert charts == [{"symbol": "MSFT"}]

    @pytest.mark.asyncio
    async def test_no_holdings(self, db_session, mock_rapidapi):
        user = await create_user(db_session, "alice")
        assert await ChartService(db_session, mock_rapidapi).get_charts(user.id) == []
