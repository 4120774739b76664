# waterlogic/api/v1/endpoints/technologies.py
from __future__ import annotations
from typing import List

from fastapi import APIRouter, HTTPException

from waterlogic.schemas.evaluation import (
    SectorPresetOut,
    TechnologyChainOut,
    TechnologyOut,
    chain_out,
    preset_out,
    technology_out,
)
from waterlogic.services.engine.registry import (
    get_preset,
    get_technology,
    list_chains,
    list_presets,
    list_technologies,
)

router = APIRouter()


@router.get("", response_model=List[TechnologyOut])
def read_technologies():
    """등록된 처리 기술 전체 (TechnologyId enum 순서)"""
    return [technology_out(t) for t in list_technologies()]


@router.get("/chains", response_model=List[TechnologyChainOut])
def read_chains():
    """평가 대상 사전 정의 체인 (열거 순서 = 동점 처리 순서)"""
    return [chain_out(c) for c in list_chains()]


@router.get("/presets", response_model=List[SectorPresetOut])
def read_presets():
    return [preset_out(p) for p in list_presets()]


@router.get("/presets/{sector}", response_model=SectorPresetOut)
def read_preset(sector: str):
    preset = get_preset(sector)
    if preset is None:
        raise HTTPException(status_code=404, detail=f"Unknown sector preset: {sector}")
    return preset_out(preset)


@router.get("/{tech_id}", response_model=TechnologyOut)
def read_technology(tech_id: str):
    try:
        return technology_out(get_technology(tech_id))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
