# waterlogic/services/engine/trail.py
# Decision Trail
# - append-only 근거 로그 (실행 중 수정/삭제 불가)
# - fingerprint: 입력 + 선택 후보의 결정적 64-bit 해시 (보안용 아님, 추적용)
from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from waterlogic.schemas.specification import CustomerSpecification
from waterlogic.services.engine.models import Candidate, DecisionTrailEntry

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DecisionTrail:
    """한 평가 세션 동안 누적되는 의사결정 기록."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or utcnow
        self._entries: List[DecisionTrailEntry] = []

    def log_decision(
        self, action: str, rationale: str, fingerprint: Optional[str] = None
    ) -> DecisionTrailEntry:
        entry = DecisionTrailEntry(
            timestamp=self._clock(),
            action=str(action),
            rationale=str(rationale),
            fingerprint=fingerprint,
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> Tuple[DecisionTrailEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _candidate_payload(candidate: Optional[Candidate]) -> Optional[Dict[str, Any]]:
    if candidate is None:
        return None
    perf = candidate.performance
    econ = candidate.economics
    return {
        "name": candidate.chain.name,
        "techs": [t.value for t in candidate.chain.techs],
        "removal": {
            "tss": round(perf.tss_removal, 9),
            "tds": round(perf.tds_removal, 9),
            "bod": round(perf.bod_removal, 9),
            "cod": round(perf.cod_removal, 9),
        },
        "capex": round(econ.capex, 6),
        "opex": round(econ.opex, 6),
        "npv": round(econ.npv, 6),
        "feasible": candidate.feasible,
    }


def fingerprint(
    spec: CustomerSpecification,
    candidate: Optional[Candidate],
    timestamp: Optional[datetime] = None,
) -> str:
    """동일 입력 + 동일 후보 (+ 동일 timestamp) ⇒ 동일 해시."""
    data = {
        "inputs": spec.model_dump(mode="json", by_alias=True),
        "solution": _candidate_payload(candidate),
        "timestamp": timestamp.isoformat() if timestamp is not None else None,
    }
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.blake2b(canonical.encode("utf-8"), digest_size=8).hexdigest()
    return "0x" + digest
