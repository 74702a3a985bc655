"""In-memory search engine for testing and lightweight scenarios.

Executes the same request bodies that are sent to the document-search
engine, against documents held in process: scored and filter clauses,
the rank popularity boost, post filters, filter/terms aggregations, the
term suggester, sorting and pagination.
"""

import copy
import logging
import math
import re
import threading
import time
from collections import Counter, defaultdict
from typing import Any

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from ..indexing.analyzers import AnalyzerManager, StandardAnalyzer
from ..indexing.fields import FieldConfiguration
from .base import EngineRejected, SearchBackend

logger = logging.getLogger(__name__)

_SUGGEST_TOKEN = re.compile(r"\w+")

_MODIFIERS = {
    "none": lambda v: v,
    "square": lambda v: v * v,
    "sqrt": lambda v: math.sqrt(v) if v > 0 else 0.0,
    "log1p": lambda v: math.log10(v + 1) if v > -1 else 0.0,
    "ln1p": lambda v: math.log(v + 1) if v > -1 else 0.0,
}

# Term suggester defaults: words shorter than this get no suggestion, and
# candidates must share the first character and be within two edits.
_SUGGEST_MIN_WORD_LENGTH = 4
_SUGGEST_MAX_EDITS = 2


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    return [value]


def _field_values(doc: dict[str, Any], field: str) -> list[Any]:
    value = doc.get(field)
    if value is None:
        return []
    if isinstance(value, list | tuple):
        return [v for v in value if v is not None]
    return [value]


def _single_entry(clause: dict[str, Any], kind: str) -> tuple[str, Any]:
    if not isinstance(clause, dict) or len(clause) != 1:
        raise EngineRejected(f"[{kind}] expects exactly one field, got {clause!r}")
    return next(iter(clause.items()))


def _max_edits(fuzziness: Any, term: str) -> int:
    """Edit distance allowed for a term under the given fuzziness."""
    if fuzziness in (None, 0, "0"):
        return 0
    if isinstance(fuzziness, str) and fuzziness.upper().startswith("AUTO"):
        if len(term) <= 2:
            return 0
        return 1 if len(term) <= 5 else 2
    try:
        edits = int(float(fuzziness))
    except (TypeError, ValueError):
        raise EngineRejected(f"Invalid fuzziness: {fuzziness!r}") from None
    # Short terms are matched exactly.
    return edits if len(term) >= 3 else 0


class MemoryBackend(SearchBackend):
    """In-memory search engine implementation."""

    def __init__(self, schema: FieldConfiguration | None = None):
        self.analyzers = AnalyzerManager(schema)
        self.indices: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._lock = threading.Lock()
        self._suggest_analyzer = StandardAnalyzer()

    def index(self, index: str, doc_id: str | int, document: dict[str, Any]) -> None:
        """Store a copy of the document, replacing any previous version."""
        with self._lock:
            self.indices[index][str(doc_id)] = copy.deepcopy(document)

    def delete(self, index: str, doc_id: str | int) -> bool:
        with self._lock:
            return self.indices[index].pop(str(doc_id), None) is not None

    def clear(self, index: str) -> None:
        with self._lock:
            self.indices.pop(index, None)

    def get_statistics(self, index: str) -> dict[str, Any]:
        return {"index": index, "total_documents": len(self.indices.get(index, {}))}

    def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        """Execute a request body against the documents of an index."""
        start_time = time.time()

        with self._lock:
            documents = list(self.indices.get(index, {}).items())

        query = body.get("query", {"match_all": {}})
        matched = []
        for doc_id, doc in documents:
            score = self._evaluate(query, doc)
            if score is not None:
                matched.append((doc_id, doc, score))

        response: dict[str, Any] = {}

        aggs = body.get("aggs", body.get("aggregations"))
        if aggs:
            response["aggregations"] = self._aggregate(aggs, [d for _, d, _ in matched])

        post_filter = body.get("post_filter")
        if post_filter:
            matched = [
                m for m in matched if self._evaluate(post_filter, m[1]) is not None
            ]

        matched = self._sort(matched, body.get("sort"))

        offset = body.get("from", 0)
        size = body.get("size", 10)
        if not isinstance(offset, int) or offset < 0:
            raise EngineRejected(
                f"[from] must be a non-negative integer, got {offset!r}"
            )
        if not isinstance(size, int) or size < 0:
            raise EngineRejected(f"[size] must be a non-negative integer, got {size!r}")

        page = matched[offset : offset + size]
        response["hits"] = {
            "total": {"value": len(matched), "relation": "eq"},
            "max_score": max((s for _, _, s in matched), default=None),
            "hits": [
                {
                    "_index": index,
                    "_id": doc_id,
                    "_score": score,
                    "_source": copy.deepcopy(doc),
                }
                for doc_id, doc, score in page
            ],
        }

        if body.get("suggest"):
            response["suggest"] = self._suggest(body["suggest"], documents)

        response["took"] = int((time.time() - start_time) * 1000)
        logger.debug(f"Memory search on {index}: {len(matched)} hits")
        return response

    # Query evaluation: each clause returns a score, or None when the
    # document does not match.

    def _evaluate(self, clause: dict[str, Any], doc: dict[str, Any]) -> float | None:
        kind, spec = _single_entry(clause, "query")
        handler = getattr(self, f"_eval_{kind}", None)
        if handler is None:
            raise EngineRejected(f"Unknown query clause [{kind}]")
        return handler(spec, doc)

    def _eval_match_all(self, spec: dict[str, Any], doc: dict[str, Any]) -> float:
        return float(spec.get("boost", 1.0)) if spec else 1.0

    def _eval_term(self, spec: dict[str, Any], doc: dict[str, Any]) -> float | None:
        field, value = _single_entry(spec, "term")
        if isinstance(value, dict):
            value = value.get("value")
        return 1.0 if value in _field_values(doc, field) else None

    def _eval_terms(self, spec: dict[str, Any], doc: dict[str, Any]) -> float | None:
        field, values = _single_entry(spec, "terms")
        accepted = set(_as_list(values))
        if any(v in accepted for v in _field_values(doc, field)):
            return 1.0
        return None

    def _eval_prefix(self, spec: dict[str, Any], doc: dict[str, Any]) -> float | None:
        field, value = _single_entry(spec, "prefix")
        if isinstance(value, dict):
            value = value.get("value")
        for candidate in _field_values(doc, field):
            if isinstance(candidate, str) and candidate.startswith(value):
                return 1.0
        return None

    def _eval_bool(self, spec: dict[str, Any], doc: dict[str, Any]) -> float | None:
        score = 0.0

        for clause in _as_list(spec.get("must", [])):
            clause_score = self._evaluate(clause, doc)
            if clause_score is None:
                return None
            score += clause_score

        for clause in _as_list(spec.get("filter", [])):
            if self._evaluate(clause, doc) is None:
                return None

        for clause in _as_list(spec.get("must_not", [])):
            if self._evaluate(clause, doc) is not None:
                return None

        should = _as_list(spec.get("should", []))
        if should:
            should_scores = [self._evaluate(c, doc) for c in should]
            matched = [s for s in should_scores if s is not None]
            only_should = not spec.get("must") and not spec.get("filter")
            if only_should and not matched:
                return None
            score += sum(matched)

        return score

    def _eval_function_score(
        self, spec: dict[str, Any], doc: dict[str, Any]
    ) -> float | None:
        score = self._evaluate(spec.get("query", {"match_all": {}}), doc)
        if score is None:
            return None

        factor_spec = spec.get("field_value_factor")
        if not factor_spec:
            return score

        values = _field_values(doc, factor_spec["field"])
        value = values[0] if values else factor_spec.get("missing", 0)
        modifier = _MODIFIERS.get(factor_spec.get("modifier", "none"))
        if modifier is None:
            raise EngineRejected(f"Unknown modifier [{factor_spec['modifier']}]")

        boost = modifier(float(value) * float(factor_spec.get("factor", 1)))
        if spec.get("boost_mode", "multiply") == "sum":
            return score + boost
        return score * boost

    def _eval_multi_match(
        self, spec: dict[str, Any], doc: dict[str, Any]
    ) -> float | None:
        """Cross-fields match: every query term may match in any field."""
        text = spec.get("query", "")
        operator = str(spec.get("operator", "or")).lower()
        fuzziness = spec.get("fuzziness")

        fields = []
        for reference in spec.get("fields", []):
            name, _, boost = reference.partition("^")
            fields.append((name, float(boost) if boost else 1.0))

        total = 0.0
        matched_terms = 0
        considered_terms = 0
        for term in text.split():
            term_score, analyzable = self._score_term(
                term, text, fields, doc, fuzziness
            )
            if not analyzable:
                continue
            considered_terms += 1
            if term_score > 0:
                matched_terms += 1
                total += term_score
            elif operator == "and":
                return None

        if considered_terms == 0 or matched_terms == 0:
            return None
        return total

    def _score_term(
        self,
        term: str,
        text: str,
        fields: list[tuple[str, float]],
        doc: dict[str, Any],
        fuzziness: Any,
    ) -> tuple[float, bool]:
        """Best boosted score of one query term across the fields.

        Returns:
            The score (0 when unmatched) and whether the term counts at
            all; stopwords that no keyword field matches do not
        """
        best = 0.0
        analyzable = False
        for field, boost in fields:
            values = _field_values(doc, field)
            if self.analyzers.is_exact(field):
                if term in values or text.strip() in values:
                    analyzable = True
                    best = max(best, boost)
                continue

            query_tokens = self.analyzers.analyze_field(field, term)
            if not query_tokens:
                continue
            analyzable = True

            field_tokens = set()
            for value in values:
                field_tokens.update(self.analyzers.analyze_field(field, str(value)))
            if not field_tokens:
                continue

            weight = self._token_weight(query_tokens, field_tokens, fuzziness)
            best = max(best, boost * weight)
        return best, analyzable

    def _token_weight(
        self, query_tokens: list[str], field_tokens: set[str], fuzziness: Any
    ) -> float:
        """1.0 for exact matches, 0.5 when fuzziness was needed, else 0."""
        weight = 1.0
        for token in query_tokens:
            if token in field_tokens:
                continue
            edits = _max_edits(fuzziness, token)
            if edits and any(
                Levenshtein.distance(token, candidate, score_cutoff=edits) <= edits
                for candidate in field_tokens
            ):
                weight = 0.5
                continue
            return 0.0
        return weight

    # Aggregations

    def _aggregate(
        self, aggs: dict[str, Any], docs: list[dict[str, Any]]
    ) -> dict[str, Any]:
        results = {}
        for name, spec in aggs.items():
            sub_aggs = spec.get("aggs", spec.get("aggregations"))
            if "filter" in spec:
                selected = [
                    d for d in docs if self._evaluate(spec["filter"], d) is not None
                ]
                result: dict[str, Any] = {"doc_count": len(selected)}
                if sub_aggs:
                    result.update(self._aggregate(sub_aggs, selected))
            elif "terms" in spec:
                result = self._terms_aggregation(spec["terms"], docs)
            else:
                raise EngineRejected(f"Unsupported aggregation {name!r}: {spec!r}")
            results[name] = result
        return results

    def _terms_aggregation(
        self, spec: dict[str, Any], docs: list[dict[str, Any]]
    ) -> dict[str, Any]:
        field = spec["field"]
        size = spec.get("size", 10)
        if not isinstance(size, int) or size < 1:
            raise EngineRejected(f"[size] must be greater than 0, got {size!r}")

        counts: Counter = Counter()
        for doc in docs:
            counts.update(set(_field_values(doc, field)))

        ordered = sorted(counts.items(), key=lambda item: (-item[1], str(item[0])))
        buckets = [{"key": key, "doc_count": count} for key, count in ordered[:size]]
        return {
            "doc_count_error_upper_bound": 0,
            "sum_other_doc_count": sum(count for _, count in ordered[size:]),
            "buckets": buckets,
        }

    # Sorting

    def _sort(
        self, matched: list[tuple[str, dict[str, Any], float]], sort: Any
    ) -> list[tuple[str, dict[str, Any], float]]:
        keys = self._sort_keys(sort)

        # Stable sorts applied from the least significant key; documents
        # without a value go last in either direction.
        for field, order in reversed(keys):
            if field == "_score":
                matched = sorted(matched, key=lambda m: m[2], reverse=order == "desc")
                continue

            def value_of(m, field=field):
                values = _field_values(m[1], field)
                return values[0] if values else None

            present = [m for m in matched if value_of(m) is not None]
            missing = [m for m in matched if value_of(m) is None]
            present.sort(key=value_of, reverse=order == "desc")
            matched = present + missing
        return matched

    def _sort_keys(self, sort: Any) -> list[tuple[str, str]]:
        if not sort:
            return [("_score", "desc")]

        keys = []
        for item in _as_list(sort):
            if isinstance(item, str):
                field, order = item, "desc" if item == "_score" else "asc"
            else:
                field, order = _single_entry(item, "sort")
                if isinstance(order, dict):
                    order = order.get("order", "asc")
            order = str(order).lower()
            if order not in ("asc", "desc"):
                raise EngineRejected(f"Unknown sort order [{order}] for [{field}]")
            keys.append((field, order))
        return keys

    # Suggestions

    def _suggest(
        self, suggest: dict[str, Any], documents: list[tuple[str, dict[str, Any]]]
    ) -> dict[str, Any]:
        results = {}
        for name, spec in suggest.items():
            term_spec = spec.get("term")
            if term_spec is None:
                raise EngineRejected(f"Unsupported suggester {name!r}")
            results[name] = self._term_suggestions(
                spec.get("text", ""), term_spec, documents
            )
        return results

    def _term_suggestions(
        self,
        text: str,
        spec: dict[str, Any],
        documents: list[tuple[str, dict[str, Any]]],
    ) -> list[dict[str, Any]]:
        field = spec["field"]
        size = spec.get("size", 5)

        vocabulary: Counter = Counter()
        for _, doc in documents:
            for value in _field_values(doc, field):
                vocabulary.update(set(self._suggest_analyzer.analyze(str(value))))

        entries = []
        for match in _SUGGEST_TOKEN.finditer(text):
            token = match.group().lower()
            entry = {
                "text": match.group(),
                "offset": match.start(),
                "length": len(match.group()),
                "options": [],
            }
            if len(token) >= _SUGGEST_MIN_WORD_LENGTH and token not in vocabulary:
                entry["options"] = self._closest_terms(token, vocabulary, size)
            entries.append(entry)
        return entries

    def _closest_terms(
        self, token: str, vocabulary: Counter, size: int
    ) -> list[dict[str, Any]]:
        candidates = [word for word in vocabulary if word[:1] == token[:1]]
        matches = process.extract(
            token,
            candidates,
            scorer=Levenshtein.distance,
            score_cutoff=_SUGGEST_MAX_EDITS,
            limit=None,
        )
        ranked = sorted(matches, key=lambda m: (m[1], -vocabulary[m[0]], m[0]))
        return [
            {
                "text": word,
                "score": round(Levenshtein.normalized_similarity(token, word), 3),
                "freq": vocabulary[word],
            }
            for word, _, _ in ranked[:size]
        ]
