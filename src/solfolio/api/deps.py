from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from solfolio.config import Settings
from solfolio.container import Container
from solfolio.portfolio.aggregator import PortfolioAggregator
from solfolio.portfolio.burn import BurnService


@inject
async def get_settings(settings: Settings = Depends(Provide[Container.settings])) -> Settings:
    return settings


@inject
async def get_portfolio_aggregator(
    aggregator: PortfolioAggregator = Depends(Provide[Container.portfolio_aggregator]),
) -> PortfolioAggregator:
    return aggregator


@inject
async def get_burn_service(
    service: BurnService = Depends(Provide[Container.burn_service]),
) -> BurnService:
    return service


SettingsDep = Annotated[Settings, Depends(get_settings)]
AggregatorDep = Annotated[PortfolioAggregator, Depends(get_portfolio_aggregator)]
BurnServiceDep = Annotated[BurnService, Depends(get_burn_service)]
