"""Unit tests for turn payload ingestion.

Tests cover:
- Map normalization and warnings
- Entity sanitization
- Container offset translation and dropping
- Options defaults and padding
"""

from glyphworld.engine.ingest import (
    DEFAULT_OPTIONS,
    FILLER_OPTION,
    WARNING_CONTAINERS_DROPPED,
    WARNING_OPTIONS_PADDED,
    ensure_options,
    ingest_turn,
    translate_containers,
)
from glyphworld.models.world import (
    Container,
    Entity,
    EntityStatus,
    Option,
    TurnPayload,
    WealthTier,
)


class TestIngestTurn:
    """Tests for ingest_turn."""

    def test_clean_payload(self, sample_payload, kitchen_rows) -> None:
        ingested = ingest_turn(sample_payload)

        assert ingested.map.rows == kitchen_rows
        assert [e.name for e in ingested.entities] == ["Ahmad", "Bilal"]
        assert ingested.containers[0].x == 8
        assert ingested.wealth_tier == WealthTier.MODEST
        assert ingested.warnings == []
        assert ingested.parse_error is None

    def test_empty_entity_names_are_dropped(self) -> None:
        payload = TurnPayload(
            local_map="@",
            present_entities=[
                Entity(name="  "),
                Entity(name=" Ahmad ", status="Sick / feverish"),
            ],
        )
        ingested = ingest_turn(payload)

        assert [e.name for e in ingested.entities] == ["Ahmad"]
        assert ingested.entities[0].status == EntityStatus.SICK

    def test_containers_follow_crop_offset(self) -> None:
        rows = ["." * 40 for _ in range(20)]
        rows[18] = rows[18][:35] + "@" + rows[18][36:]
        payload = TurnPayload(
            local_map="\n".join(rows),
            present_containers=[
                Container(id="kept", name="Jar", x=12, y=8),
                Container(id="dropped", name="Sack", x=2, y=1),
            ],
        )
        ingested = ingest_turn(payload)

        assert [c.id for c in ingested.containers] == ["kept"]
        assert (ingested.containers[0].x, ingested.containers[0].y) == (2, 2)
        assert WARNING_CONTAINERS_DROPPED in ingested.warnings

    def test_missing_container_list_keeps_previous(self) -> None:
        previous = [Container(id="c1", name="Chest", x=1, y=0)]
        ingested = ingest_turn(TurnPayload(local_map="@."), previous_containers=previous)
        assert [c.id for c in ingested.containers] == ["c1"]

    def test_empty_container_list_clears(self) -> None:
        previous = [Container(id="c1", name="Chest", x=1, y=0)]
        payload = TurnPayload(local_map="@.", present_containers=[])
        assert ingest_turn(payload, previous_containers=previous).containers == []

    def test_corrupted_map_gets_marker(self) -> None:
        ingested = ingest_turn(TurnPayload(local_map=" [ MAP DATA CORRUPTED ] "))

        assert sum(row.count("@") for row in ingested.map.rows) == 1
        assert ingested.warnings

    def test_explicit_wealth_and_parse_error(self) -> None:
        payload = TurnPayload(
            local_map="@",
            new_location="Spice Souk",
            location_wealth="elite",
            debug_parse_error="Unknown parse error",
        )
        ingested = ingest_turn(payload)

        assert ingested.wealth_tier == WealthTier.ELITE
        assert ingested.location == "Spice Souk"
        assert ingested.parse_error == "Unknown parse error"

    def test_wealth_falls_back_to_location(self) -> None:
        payload = TurnPayload(local_map="@", new_location="Spice Souk, Cairo")
        assert ingest_turn(payload).wealth_tier == WealthTier.MERCHANT


class TestEnsureOptions:
    """Tests for ensure_options."""

    def test_empty_gets_defaults(self) -> None:
        options, padded = ensure_options([])

        assert [o.text for o in options] == list(DEFAULT_OPTIONS)
        assert padded is False

    def test_short_list_is_padded(self) -> None:
        options, padded = ensure_options([Option(id=1, text="Run")])

        assert [o.text for o in options] == ["Run", FILLER_OPTION, FILLER_OPTION]
        assert [o.id for o in options] == [1, 2, 3]
        assert padded is True

    def test_padding_is_reported(self) -> None:
        payload = TurnPayload(local_map="@", options=[Option(id=1, text="Run")])
        assert WARNING_OPTIONS_PADDED in ingest_turn(payload).warnings

    def test_full_list_untouched(self) -> None:
        given = [Option(id=i, text=f"Option {i}") for i in range(1, 5)]
        options, padded = ensure_options(given)
        assert options == given
        assert padded is False


class TestTranslateContainers:
    def test_bounds_are_exclusive(self) -> None:
        containers = [
            Container(id="edge", name="Box", x=9, y=5),
            Container(id="out", name="Box", x=10, y=5),
        ]
        translated = translate_containers(containers, 0, 0, 10, 6)
        assert [c.id for c in translated] == ["edge"]
