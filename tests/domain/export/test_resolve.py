from __future__ import annotations

import pytest

from factexport.domain.export import ResolverError, index_candidates, resolve
from factexport.domain.model import ResolvedFact, UnresolvedReference
from tests.helpers.facts import blog_rows, candidate, make_row, ref


def test_resolve_binds_single_and_sequence_roles() -> None:
    row = make_row(
        10,
        "Comment",
        fields={"text": "hi"},
        declared={
            "post": ref("Post", "p"),
            "authors": (ref("User", "u2"), ref("User", "u1")),
        },
        candidates=[
            candidate(1, "User", "u1"),
            candidate(2, "User", "u2"),
            candidate(3, "Post", "p"),
        ],
    )

    result = resolve(row)

    assert isinstance(result, ResolvedFact)
    assert result.predecessors["post"] == candidate(3, "Post", "p")
    assert result.predecessors["authors"] == (
        candidate(2, "User", "u2"),
        candidate(1, "User", "u1"),
    )
    assert list(result.predecessors) == ["post", "authors"]
    assert dict(result.fields) == {"text": "hi"}
    assert result.key == ("Comment", "hash-10")


def test_resolve_keeps_empty_sequence_as_sequence() -> None:
    result = resolve(blog_rows()[2])

    assert isinstance(result, ResolvedFact)
    assert result.predecessors["prior"] == ()
    assert result.predecessors["post"] == candidate(2, "Post", "post-hash")


def test_resolve_fact_without_predecessors() -> None:
    result = resolve(blog_rows()[0])

    assert isinstance(result, ResolvedFact)
    assert dict(result.predecessors) == {}


def test_resolve_matches_on_type_and_hash_together() -> None:
    row = make_row(
        5,
        "Post",
        declared={"site": ref("Site", "shared")},
        candidates=[candidate(1, "Domain", "shared")],
    )

    result = resolve(row)

    assert isinstance(result, UnresolvedReference)
    assert result.role == "site"
    assert result.reference == ref("Site", "shared")
    assert result.position is None


def test_resolve_reports_first_missing_sequence_element() -> None:
    row = make_row(
        7,
        "Thread",
        declared={"members": (ref("User", "a"), ref("User", "missing"), ref("User", "gone"))},
        candidates=[candidate(1, "User", "a")],
    )

    result = resolve(row)

    assert isinstance(result, UnresolvedReference)
    assert result.surrogate_id == 7
    assert result.position == 1
    assert result.reference == ref("User", "missing")
    assert "members[1]" in result.describe()


def test_resolve_uses_only_the_rows_own_candidates() -> None:
    site, post, _ = blog_rows()
    orphan = make_row(9, "Post", declared={"site": ref("Site", site.content_hash)})

    assert isinstance(resolve(post), ResolvedFact)
    assert isinstance(resolve(orphan), UnresolvedReference)


def test_duplicate_candidates_resolve_to_one_of_them() -> None:
    row = make_row(
        4,
        "Post",
        declared={"site": ref("Site", "s")},
        candidates=[candidate(1, "Site", "s"), candidate(1, "Site", "s")],
    )

    result = resolve(row)

    assert isinstance(result, ResolvedFact)
    assert result.predecessors["site"] == candidate(1, "Site", "s")
    assert len(index_candidates(row.candidate_predecessors)) == 1


def test_resolved_fact_is_immutable() -> None:
    result = resolve(blog_rows()[1])
    assert isinstance(result, ResolvedFact)

    with pytest.raises(TypeError):
        result.fields["createdAt"] = "later"  # type: ignore[index]


def test_malformed_declaration_raises_resolver_error() -> None:
    row = make_row(3, "Post", declared={"site": "Site:abc"})  # type: ignore[dict-item]

    with pytest.raises(ResolverError, match="site"):
        resolve(row)
