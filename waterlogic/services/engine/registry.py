# waterlogic/services/engine/registry.py
from __future__ import annotations

from typing import List, Optional, Sequence, Union

from waterlogic.data.technologies import INDUSTRY_PRESETS, TECH_CHAINS, TECHNOLOGIES
from waterlogic.schemas.common import TechnologyId
from waterlogic.services.engine.models import SectorPreset, Technology, TechnologyChain


def resolve_id(tech: Union[str, TechnologyId]) -> TechnologyId:
    """문자열/enum 무엇이 오든 TechnologyId로 정규화. 모르는 ID는 ValueError."""
    if isinstance(tech, TechnologyId):
        return tech
    key = str(tech or "").strip().upper()
    try:
        return TechnologyId(key)
    except ValueError:
        raise ValueError(f"Unknown technology id: {tech!r}") from None


def get_technology(tech: Union[str, TechnologyId]) -> Technology:
    return TECHNOLOGIES[resolve_id(tech)]


def list_technologies() -> List[Technology]:
    return [TECHNOLOGIES[t] for t in TechnologyId]


def list_chains() -> List[TechnologyChain]:
    return list(TECH_CHAINS)


def get_chain(name: str) -> Optional[TechnologyChain]:
    key = (name or "").strip().lower()
    for chain in TECH_CHAINS:
        if chain.name.lower() == key:
            return chain
    return None


def make_chain(
    techs: Sequence[Union[str, TechnologyId]], name: Optional[str] = None, description: str = ""
) -> TechnologyChain:
    """임의 조합 체인 생성 (사전 정의 목록 외 평가용)."""
    ids = tuple(resolve_id(t) for t in techs)
    return TechnologyChain(
        techs=ids,
        name=name or " + ".join(t.value for t in ids) or "Empty",
        description=description,
    )


def get_preset(sector: str) -> Optional[SectorPreset]:
    return INDUSTRY_PRESETS.get((sector or "").strip())


def list_presets() -> List[SectorPreset]:
    return list(INDUSTRY_PRESETS.values())


def is_sector_preferred(sector: str, chain: TechnologyChain) -> bool:
    preset = get_preset(sector)
    return bool(preset and chain.name in preset.preferred_chains)
