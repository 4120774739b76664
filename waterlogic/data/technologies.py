# waterlogic/data/technologies.py
# 수처리 단위공정 기술 레퍼런스 데이터 (로드 후 변경 금지)
from __future__ import annotations

from typing import Dict, List

from waterlogic.schemas.common import TechnologyId
from waterlogic.services.engine.models import SectorPreset, Technology, TechnologyChain

T = TechnologyId

TECHNOLOGIES: Dict[TechnologyId, Technology] = {
    T.UF: Technology(
        id=T.UF,
        name="Ultrafiltration",
        full_name="Ultrafiltration Membrane",
        description=(
            "Membrane filtration process that removes particles, bacteria, and some "
            "viruses using pore sizes of 0.01-0.1 microns."
        ),
        tss_removal=0.99,
        tds_removal=0.05,
        bod_removal=0.30,
        cod_removal=0.25,
        energy=0.3,
        footprint=0.8,
        capex_factor=1.0,
        maintenance=0.02,
        chemical_consumption=0.01,
        lifespan=7,
        applications=("Pre-treatment", "Clarification", "Pathogen removal"),
    ),
    T.MBR: Technology(
        id=T.MBR,
        name="Membrane Bioreactor",
        full_name="Membrane Bioreactor System",
        description=(
            "Combines biological treatment with membrane filtration for wastewater, "
            "integrating activated sludge process with membrane separation."
        ),
        tss_removal=0.99,
        tds_removal=0.10,
        bod_removal=0.95,
        cod_removal=0.90,
        energy=0.8,
        footprint=0.5,
        capex_factor=1.8,
        maintenance=0.04,
        chemical_consumption=0.03,
        lifespan=10,
        applications=("Wastewater treatment", "Industrial effluent", "Water reuse"),
    ),
    T.RO: Technology(
        id=T.RO,
        name="Reverse Osmosis",
        full_name="Reverse Osmosis Membrane System",
        description=(
            "High-pressure membrane process that removes dissolved salts, minerals, "
            "and most contaminants using semi-permeable membranes."
        ),
        tss_removal=0.99,
        tds_removal=0.97,
        bod_removal=0.95,
        cod_removal=0.95,
        energy=2.5,
        footprint=1.0,
        capex_factor=2.2,
        maintenance=0.03,
        chemical_consumption=0.05,
        lifespan=5,
        applications=("Desalination", "Demineralization", "High-purity water"),
    ),
    T.UV: Technology(
        id=T.UV,
        name="UV Disinfection",
        full_name="Ultraviolet Disinfection System",
        description=(
            "Uses ultraviolet light to inactivate pathogens without chemical "
            "addition. Effective against bacteria, viruses, and protozoa."
        ),
        tss_removal=0.0,
        tds_removal=0.0,
        bod_removal=0.0,
        cod_removal=0.0,
        energy=0.1,
        footprint=0.2,
        capex_factor=0.3,
        maintenance=0.05,
        chemical_consumption=0.0,
        lifespan=15,  # with lamp replacement
        applications=("Disinfection", "Polishing", "Dechlorination"),
    ),
    T.AOP: Technology(
        id=T.AOP,
        name="Advanced Oxidation",
        full_name="Advanced Oxidation Process",
        description=(
            "Chemical process using hydroxyl radicals to oxidize and break down "
            "organic compounds and micropollutants."
        ),
        tss_removal=0.3,
        tds_removal=0.2,
        bod_removal=0.8,
        cod_removal=0.85,
        energy=1.2,
        footprint=0.4,
        capex_factor=1.5,
        maintenance=0.04,
        chemical_consumption=0.15,
        lifespan=12,
        applications=("Micropollutant removal", "Taste/odor control", "COD reduction"),
    ),
    T.NF: Technology(
        id=T.NF,
        name="Nanofiltration",
        full_name="Nanofiltration Membrane System",
        description=(
            "Membrane process between UF and RO, removing divalent ions, organics, "
            "and color while allowing monovalent ions to pass."
        ),
        tss_removal=0.99,
        tds_removal=0.60,
        bod_removal=0.80,
        cod_removal=0.75,
        energy=1.0,
        footprint=0.9,
        capex_factor=1.6,
        maintenance=0.03,
        chemical_consumption=0.03,
        lifespan=6,
        applications=("Softening", "Color removal", "Selective ion removal"),
    ),
    T.DAF: Technology(
        id=T.DAF,
        name="Dissolved Air Flotation",
        full_name="Dissolved Air Flotation System",
        description=(
            "Physical separation process using micro-bubbles to float suspended "
            "solids, oils, and grease to the surface for removal."
        ),
        tss_removal=0.90,
        tds_removal=0.0,
        bod_removal=0.30,
        cod_removal=0.25,
        energy=0.05,
        footprint=1.5,
        capex_factor=0.8,
        maintenance=0.02,
        chemical_consumption=0.02,
        lifespan=20,
        applications=("FOG removal", "Pre-treatment", "Algae removal"),
    ),
}

# 열거 순서가 곧 동점 처리(tie-break) 순서
TECH_CHAINS: List[TechnologyChain] = [
    TechnologyChain((T.UF, T.RO), "UF + RO", "Standard high-purity treatment"),
    TechnologyChain((T.MBR, T.RO), "MBR + RO", "Biological treatment with RO polishing"),
    TechnologyChain((T.UF,), "UF Only", "Particle/pathogen removal"),
    TechnologyChain((T.MBR,), "MBR Only", "Biological treatment"),
    TechnologyChain((T.UF, T.RO, T.UV), "UF + RO + UV", "Full treatment with disinfection"),
    TechnologyChain((T.DAF, T.UF, T.RO), "DAF + UF + RO", "Complete train for high-load water"),
    TechnologyChain((T.MBR, T.NF), "MBR + NF", "Softening and organics removal"),
    TechnologyChain((T.UF, T.AOP, T.RO), "UF + AOP + RO", "Micropollutant treatment"),
]

INDUSTRY_PRESETS: Dict[str, SectorPreset] = {
    "pharmaceutical": SectorPreset(
        id="pharmaceutical",
        name="Pharmaceutical",
        required_quality={"tss": 0.1, "tds": 10.0, "bod": 1.0},
        preferred_chains=("UF + RO", "UF + RO + UV"),
        esg_priority="water",
    ),
    "foodBeverage": SectorPreset(
        id="foodBeverage",
        name="Food & Beverage",
        required_quality={"tss": 1.0, "tds": 100.0, "bod": 5.0},
        preferred_chains=("UF + RO", "MBR + RO"),
        esg_priority="carbon",
    ),
    "power": SectorPreset(
        id="power",
        name="Power Generation",
        required_quality={"tss": 0.5, "tds": 5.0, "bod": 2.0},
        preferred_chains=("UF + RO", "DAF + UF + RO"),
        esg_priority="energy",
    ),
    "municipal": SectorPreset(
        id="municipal",
        name="Municipal",
        required_quality={"tss": 10.0, "tds": 500.0, "bod": 10.0},
        preferred_chains=("MBR Only", "UF + RO + UV"),
        esg_priority="carbon",
    ),
    "oilGas": SectorPreset(
        id="oilGas",
        name="Oil & Gas",
        required_quality={"tss": 5.0, "tds": 1000.0, "bod": 20.0},
        preferred_chains=("DAF + UF + RO", "MBR + NF"),
        esg_priority="water",
    ),
    "semiconductor": SectorPreset(
        id="semiconductor",
        name="Semiconductor",
        required_quality={"tss": 0.01, "tds": 0.1, "bod": 0.1},
        preferred_chains=("UF + RO + UV", "UF + AOP + RO"),
        esg_priority="energy",
    ),
}
