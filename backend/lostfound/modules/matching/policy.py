from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from ...models.app_setting import AppSetting
from .records import ItemFacts, MatchCandidate
from .similarity import has_model_mismatch, metadata_similarity


def _as_bool(value, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        if value.strip() == "":
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class MatchingPolicy:
    threshold: float = 0.4
    # Score above which a model mismatch no longer vetoes the candidate
    override_threshold: float = 0.6
    model_veto: bool = True
    visual_weight: float = 0.6
    top_k: int = 5

    @classmethod
    def from_config(cls, config: Mapping, *, use_settings: bool = True) -> "MatchingPolicy":
        """Policy from app config, with ``matching.*`` app settings taking precedence."""
        threshold = float(config.get("MATCH_THRESHOLD", cls.threshold))
        override = float(config.get("MATCH_OVERRIDE_THRESHOLD", cls.override_threshold))
        veto = _as_bool(config.get("MATCH_MODEL_VETO"), cls.model_veto)
        if use_settings:
            threshold = AppSetting.get_float("matching.threshold", threshold)
            override = AppSetting.get_float("matching.override_threshold", override)
            veto = AppSetting.get_bool("matching.model_veto", veto)
        return cls(
            threshold=threshold,
            override_threshold=override,
            model_veto=veto,
            visual_weight=min(1.0, max(0.0, float(config.get("MATCH_VISUAL_WEIGHT", cls.visual_weight)))),
            top_k=max(0, int(config.get("MATCH_TOP_K", cls.top_k))),
        )

    def combine(self, metadata_score: float, visual_score: Optional[float]) -> float:
        if visual_score is None:
            score = metadata_score
        else:
            score = self.visual_weight * visual_score + (1.0 - self.visual_weight) * metadata_score
        return min(1.0, max(0.0, score))

    def includes(self, final_score: float, model_mismatch: bool) -> bool:
        if final_score > self.threshold and not (self.model_veto and model_mismatch):
            return True
        return final_score > self.override_threshold


def evaluate(lost: ItemFacts, found: ItemFacts, visual_score: Optional[float], policy: MatchingPolicy) -> MatchCandidate:
    metadata_score = metadata_similarity(lost, found)
    return MatchCandidate(
        found=found,
        metadata_score=metadata_score,
        visual_score=visual_score,
        final_score=policy.combine(metadata_score, visual_score),
        model_mismatch=has_model_mismatch(lost.model, found.model),
    )


def select_top(candidates: Iterable[MatchCandidate], policy: MatchingPolicy) -> List[MatchCandidate]:
    """Included candidates, best first, at most ``top_k``.

    ``sorted`` is stable, so equal scores keep their pool order.
    """
    kept = [c for c in candidates if policy.includes(c.final_score, c.model_mismatch)]
    kept = sorted(kept, key=lambda c: c.final_score, reverse=True)
    return kept[: policy.top_k]
