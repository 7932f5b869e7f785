"""Source adapters for federal, state and nonprofit grant APIs."""

from typing import Dict, List, Type

from ..config.config import Config
from ..models.opportunity import SourceId
from .base import BaseAdapter
from .california import CaliforniaGrantsAdapter
from .fema import FemaAdapter
from .grants_gov import GrantsGovAdapter
from .nih_reporter import FederalReporterAdapter, NihReporterAdapter
from .nsf import NsfAdapter
from .propublica import ProPublicaAdapter
from .regulations import RegulationsAdapter
from .sam_gov import SamGovAdapter
from .usaspending import UsaSpendingAdapter

ADAPTER_CLASSES: Dict[SourceId, Type[BaseAdapter]] = {
    SourceId.GRANTS_GOV: GrantsGovAdapter,
    SourceId.SAM_GOV: SamGovAdapter,
    SourceId.NIH: NihReporterAdapter,
    SourceId.NSF: NsfAdapter,
    SourceId.USASPENDING: UsaSpendingAdapter,
    SourceId.FEMA: FemaAdapter,
    SourceId.PROPUBLICA: ProPublicaAdapter,
    SourceId.REGULATIONS: RegulationsAdapter,
    SourceId.FEDERAL_REPORTER: FederalReporterAdapter,
    SourceId.CALIFORNIA: CaliforniaGrantsAdapter,
}


def build_adapters(config: Config) -> List[BaseAdapter]:
    """Adapters for every enabled source, keys taken from config."""
    adapters: List[BaseAdapter] = []
    for source in config.sources:
        if source == SourceId.GRANTS_GOV:
            adapters.append(GrantsGovAdapter(attribution_header=config.grants_gov_attribution))
        elif source == SourceId.SAM_GOV:
            adapters.append(SamGovAdapter(api_key=config.sam_api_key))
        elif source == SourceId.REGULATIONS:
            adapters.append(RegulationsAdapter(api_key=config.regulations_api_key))
        else:
            adapters.append(ADAPTER_CLASSES[source]())
    return adapters


__all__ = [
    "ADAPTER_CLASSES",
    "BaseAdapter",
    "build_adapters",
    "CaliforniaGrantsAdapter",
    "FederalReporterAdapter",
    "FemaAdapter",
    "GrantsGovAdapter",
    "NihReporterAdapter",
    "NsfAdapter",
    "ProPublicaAdapter",
    "RegulationsAdapter",
    "SamGovAdapter",
    "UsaSpendingAdapter",
]
