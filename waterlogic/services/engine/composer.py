# waterlogic/services/engine/composer.py
# Chain Composer
# - 제거율: 직렬 합성 1 - Π(1 - r_i)  (체인 길이에 대해 단조 비감소, [0,1] 유지)
# - 에너지/면적/CAPEX 계수/유지보수/약품: 단순 합산
from __future__ import annotations

from functools import lru_cache

from waterlogic.schemas.common import REGULATED_PARAMETERS, TechnologyId
from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.models import CombinedPerformance, TechnologyChain
from waterlogic.services.engine.registry import get_technology
from waterlogic.services.engine.utils import clamp


@lru_cache(maxsize=256)
def compose_chain(chain: TechnologyChain) -> CombinedPerformance:
    """체인 식별자(불변 dataclass) 기준으로 캐시되는 결합 성능 계산."""
    passthrough = {p.value: 1.0 for p in REGULATED_PARAMETERS}
    energy = footprint = capex = maintenance = chemicals = 0.0

    for tech_id in chain.techs:
        tech = get_technology(tech_id)
        for p in passthrough:
            passthrough[p] *= 1.0 - clamp(tech.removal(p), 0.0, 1.0)

        energy += tech.energy
        footprint += tech.footprint
        capex += tech.capex_factor
        maintenance += tech.maintenance
        chemicals += tech.chemical_consumption

    return CombinedPerformance(
        tss_removal=clamp(1.0 - passthrough["tss"], 0.0, 1.0),
        tds_removal=clamp(1.0 - passthrough["tds"], 0.0, 1.0),
        bod_removal=clamp(1.0 - passthrough["bod"], 0.0, 1.0),
        cod_removal=clamp(1.0 - passthrough["cod"], 0.0, 1.0),
        energy=energy,
        footprint=footprint,
        capex_factor=capex,
        maintenance=maintenance,
        chemicals=chemicals,
    )


def estimate_recovery(chain: TechnologyChain, config: EngineConfig = DEFAULT_CONFIG) -> float:
    """간이 회수율 모델: RO 포함 시 농축수 손실 반영."""
    if chain.contains(TechnologyId.RO):
        return config.recovery_with_ro
    return config.recovery_without_ro
