# waterlogic/services/engine/__init__.py
# Proposal decision & pricing engine (pure computation, no I/O)

from .constants import DEFAULT_CONFIG, EngineConfig
from .composer import compose_chain, estimate_recovery
from .economics import capital_cost, economics, net_present_value, operating_cost
from .feasibility import constraint_checks, enumerate_chains, filter_feasible
from .intake import (
    annual_volume,
    data_completeness,
    normalize_esg_weights,
    normalize_specification,
    parse_specification,
    required_removal,
    validate,
)
from .models import Candidate, EvaluationResult, TechnologyChain
from .orchestrator import ProposalEngine, evaluate
from .pricing import price, win_probability
from .registry import get_chain, get_technology, list_chains, list_technologies, make_chain
from .scoring import rank, score
from .sustainability import confidence, esg_metrics
from .trail import DecisionTrail, fingerprint

__all__ = [
    "DEFAULT_CONFIG", "EngineConfig",
    "compose_chain", "estimate_recovery",
    "capital_cost", "economics", "net_present_value", "operating_cost",
    "constraint_checks", "enumerate_chains", "filter_feasible",
    "annual_volume", "data_completeness", "normalize_esg_weights",
    "normalize_specification", "parse_specification", "required_removal", "validate",
    "Candidate", "EvaluationResult", "TechnologyChain",
    "ProposalEngine", "evaluate",
    "price", "win_probability",
    "get_chain", "get_technology", "list_chains", "list_technologies", "make_chain",
    "rank", "score",
    "confidence", "esg_metrics",
    "DecisionTrail", "fingerprint",
]
