"""Tests for the browsing overlay and view."""

from mentor.core.schemas import Candidate, SearchPayload
from mentor.curator.view import BrowsingView, Overlay


def _payload() -> SearchPayload:
    return SearchPayload(
        summary="3 found",
        vacancies=(
            Candidate(id="a", title="Python dev", tags=("Python", "SQL")),
            Candidate(id="b", title="Java dev", tags=("Java", "SQL")),
            Candidate(id="c", title="React dev", tags=("React",)),
        ),
        internships=(Candidate(id="i", title="Intern", tags=("Python",)),),
    )


class TestOverlay:
    def test_toggle_saved_twice(self) -> None:
        overlay = Overlay()
        assert overlay.toggle_saved("a") is True
        assert overlay.is_saved("a")
        assert overlay.toggle_saved("a") is False
        assert not overlay.is_saved("a")
        assert overlay.saved_count == 0

    def test_toggle_hidden(self) -> None:
        overlay = Overlay()
        assert overlay.toggle_hidden("b") is True
        assert overlay.hidden == frozenset({"b"})
        assert overlay.toggle_hidden("b") is False
        assert overlay.hidden == frozenset()

    def test_saved_and_hidden_independent(self) -> None:
        overlay = Overlay()
        overlay.toggle_saved("a")
        overlay.toggle_hidden("a")
        assert overlay.is_saved("a")
        assert overlay.is_hidden("a")

    def test_unknown_id_accepted(self) -> None:
        overlay = Overlay()
        assert overlay.toggle_saved("does-not-exist") is True
        assert overlay.saved_count == 1


class TestBrowsingView:
    def test_visible_all(self) -> None:
        view = BrowsingView(_payload())
        assert [c.id for c in view.visible()] == ["a", "b", "c"]

    def test_hide_removes_from_visible(self) -> None:
        view = BrowsingView(_payload())
        view.overlay.toggle_hidden("b")
        assert [c.id for c in view.visible()] == ["a", "c"]
        view.overlay.toggle_hidden("b")
        assert [c.id for c in view.visible()] == ["a", "b", "c"]

    def test_filter(self) -> None:
        view = BrowsingView(_payload())
        view.set_filter("sql")
        assert [c.id for c in view.visible()] == ["a", "b"]
        view.set_filter(None)
        assert len(view.visible()) == 3

    def test_visible_repeatable(self) -> None:
        view = BrowsingView(_payload())
        view.overlay.toggle_hidden("a")
        view.set_filter("sql")
        assert view.visible() == view.visible()
        assert [c.id for c in view.visible()] == ["b"]

    def test_empty_filter_is_none(self) -> None:
        view = BrowsingView(_payload())
        view.set_filter("")
        assert view.category_filter is None

    def test_categories_from_vacancies_only(self) -> None:
        view = BrowsingView(_payload())
        assert view.categories()[0] == ("SQL", 2)
        assert ("Python", 1) in view.categories()

    def test_categories_ignore_overlay(self) -> None:
        view = BrowsingView(_payload())
        view.overlay.toggle_hidden("a")
        view.overlay.toggle_hidden("b")
        assert view.categories()[0] == ("SQL", 2)

    def test_category_limit(self) -> None:
        view = BrowsingView(_payload(), category_limit=2)
        assert len(view.categories()) == 2

    def test_load_resets_filter_keeps_overlay(self) -> None:
        view = BrowsingView(_payload())
        view.set_filter("python")
        view.overlay.toggle_saved("a")
        view.load(_payload())
        assert view.category_filter is None
        assert view.overlay.is_saved("a")

    def test_saved_candidates_include_internships(self) -> None:
        view = BrowsingView(_payload())
        view.overlay.toggle_saved("c")
        view.overlay.toggle_saved("i")
        assert [c.id for c in view.saved_candidates()] == ["c", "i"]

    def test_empty_view(self) -> None:
        view = BrowsingView()
        assert view.visible() == []
        assert view.categories() == []
        assert view.payload.summary == ""
