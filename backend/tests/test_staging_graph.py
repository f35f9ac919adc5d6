"""
RoomStager Backend — Staging Graph Unit Tests
===============================================

What:  Tests for the consistency rules in app.services.staging_graph.
How:   Pure in-memory ProjectDocument instances; no database, no uploads.

What we test:
    ✅ Image relocation in every area-count state, and idempotence
    ✅ Hotspot/area dual dedup (title vs area name, trimmed, case-insensitive)
    ✅ Info upsert keyed on (area, x, y) with numeric comparison
    ✅ Delete asymmetry: delete_area keeps hotspots/info, pair delete is one hop
    ✅ Library cascade vs single-placement delete
    ✅ Validation errors leave the document untouched
    ✅ Both editor walkthroughs end to end
"""

import re

import pytest

from app.exceptions import NotFoundError, ValidationError
from app.schemas.document import (
    Area,
    DirectImage,
    Hotspot,
    InfoMarker,
    ProjectDocument,
    StoredFile,
)
from app.services import staging_graph as graph

ID_PATTERN = re.compile(r"^(area|hotspot|info|item|inst)_\d{13}_[0-9a-z]+$")


def stored(name: str, mime: str = "image/png") -> StoredFile:
    return StoredFile(
        url=f"/api/files/staging/2024/06/10/{name}",
        storage_id=f"staging/2024/06/10/{name}",
        original_name=name,
        mime_type=mime,
        size=123,
    )


def new_document(**overrides) -> ProjectDocument:
    fields = dict(
        project_name="Maple Street",
        street_address="12 Maple St",
        city_locality="Springfield",
        state="IL",
        country="US",
        created_by="user-1",
    )
    fields.update(overrides)
    return ProjectDocument(**fields)


def document_with_project_image(name: str = "i0.jpg") -> ProjectDocument:
    """Project as created with a direct image: image on the project plus the auto area."""
    document = new_document()
    image = stored(name, "image/jpeg")
    document.image = DirectImage(
        url=image.url,
        public_id=image.storage_id,
        type="capture",
        original_name=image.original_name,
        mime_type=image.mime_type,
        size=image.size,
    )
    graph.create_area_from_project_image(document)
    return document


def area_with_image(name: str, image: str) -> Area:
    area = Area(area_id=f"area_1718000000000_{name.lower()}", area_name=name)
    area.set_image(stored(image))
    return area


def snapshot(document: ProjectDocument) -> dict:
    return document.to_document()


def assert_single_area_invariant(document: ProjectDocument) -> None:
    assert len(document.areas) == 1
    assert document.image.is_set
    assert not document.areas[0].has_image
    assert document.areas[0].image_public_id is None


def assert_multi_area_invariant(document: ProjectDocument) -> None:
    assert len(document.areas) >= 2
    assert not document.image.is_set
    assert document.image.public_id is None


# ══════════════════════════════════════════════════════════════════════════
# Image relocation
# ══════════════════════════════════════════════════════════════════════════


class TestRelocation:

    def test_no_areas_is_noop(self):
        document = new_document()
        document.image = DirectImage(url="/api/files/x.png", public_id="x.png")
        before = snapshot(document)

        graph.relocate_image_fields(document)

        assert snapshot(document) == before

    def test_single_area_image_moves_to_project(self):
        document = new_document()
        document.areas.append(area_with_image("Living", "living.png"))

        graph.relocate_image_fields(document)

        assert_single_area_invariant(document)
        assert document.image.url.endswith("living.png")
        assert document.image.public_id.endswith("living.png")
        assert document.image.mime_type == "image/png"
        assert document.image.type == "capture"
        assert document.image.size == 0

    def test_single_area_without_image_type_defaults_to_jpeg(self):
        document = new_document()
        area = area_with_image("Living", "living")
        area.image_type = None
        document.areas.append(area)

        graph.relocate_image_fields(document)

        assert document.image.mime_type == "image/jpeg"

    def test_two_areas_push_project_image_to_first_area(self):
        document = new_document()
        document.image = DirectImage(url="/api/files/p.jpg", public_id="p.jpg", mime_type="image/jpeg")
        first = Area(area_id="area_1_a", area_name="First")
        document.areas.extend([first, area_with_image("Second", "second.png")])

        graph.relocate_image_fields(document)

        assert_multi_area_invariant(document)
        assert first.image_url == "/api/files/p.jpg"
        assert first.image_public_id == "p.jpg"
        assert first.image_type == "jpeg"

    def test_two_areas_first_area_keeps_its_own_image(self):
        document = new_document()
        document.image = DirectImage(url="/api/files/p.jpg", public_id="p.jpg")
        first = area_with_image("First", "first.png")
        document.areas.extend([first, area_with_image("Second", "second.png")])

        graph.relocate_image_fields(document)

        assert_multi_area_invariant(document)
        assert first.image_url.endswith("first.png")

    def test_idempotent(self):
        document = document_with_project_image()
        graph.add_area(document, "Kitchen", stored("k.png"))
        once = snapshot(document)

        graph.relocate_image_fields(document)
        graph.relocate_image_fields(document)

        assert snapshot(document) == once


# ══════════════════════════════════════════════════════════════════════════
# Areas
# ══════════════════════════════════════════════════════════════════════════


class TestAreas:

    def test_create_area_from_project_image_keeps_both_copies(self):
        document = document_with_project_image("i0.jpg")

        assert len(document.areas) == 1
        area = document.areas[0]
        assert area.area_name == "Maple Street"
        assert area.image_url == document.image.url
        assert area.image_public_id == document.image.public_id
        assert area.image_type == "jpeg"
        assert document.image.is_set

    def test_create_area_without_project_image_does_nothing(self):
        document = new_document()

        assert graph.create_area_from_project_image(document) is None
        assert document.areas == []

    def test_first_area_on_empty_project_lifts_image(self):
        document = new_document()

        area = graph.add_area(document, "  Living Room ", stored("living.png"))

        assert area.area_name == "Living Room"
        assert ID_PATTERN.match(area.area_id)
        assert_single_area_invariant(document)
        assert document.image.url.endswith("living.png")

    def test_area_names_need_not_be_unique(self):
        document = document_with_project_image()

        graph.add_area(document, "Bedroom", stored("b1.png"))
        graph.add_area(document, "Bedroom", stored("b2.png"))

        assert [a.area_name for a in document.areas].count("Bedroom") == 2

    def test_add_area_image_type_from_mime(self):
        document = document_with_project_image()

        area = graph.add_area(document, "Kitchen", stored("k.webp", "image/webp"))

        assert area.image_type == "webp"

    def test_add_area_requires_name(self):
        document = document_with_project_image()
        before = snapshot(document)

        with pytest.raises(ValidationError, match="Area name is required"):
            graph.add_area(document, "   ", stored("k.png"))
        assert snapshot(document) == before

    def test_add_area_requires_image(self):
        document = document_with_project_image()

        with pytest.raises(ValidationError, match="Image is required for area"):
            graph.add_area(document, "Kitchen", None)

    def test_resolve_area_by_any_handle(self):
        document = document_with_project_image()
        area = graph.add_area(document, "Kitchen", stored("k.png"))

        assert graph.resolve_area(document, area.area_id) is area
        assert graph.resolve_area(document, area.id) is area
        assert graph.resolve_area(document, f"  {area.area_id} ") is area
        assert graph.resolve_area(document, "area_missing") is None
        assert graph.resolve_area(document, None) is None

    def test_delete_area_keeps_hotspots_and_info(self):
        document = document_with_project_image()
        parent = document.areas[0]
        kitchen = graph.add_hotspot(document, parent.area_id, "Kitchen", 10, 20, stored("k.png")).area
        graph.upsert_info(document, kitchen.area_id, "Granite counters", 5, 5)

        graph.delete_area(document, kitchen.area_id)

        assert len(document.hotspots) == 1
        assert document.hotspots[0].child_area_id == kitchen.area_id
        assert len(document.info) == 1
        assert document.info[0].area_id == kitchen.id

    def test_delete_first_area_hands_image_to_new_first(self):
        document = new_document()
        first = area_with_image("First", "first.png")
        second = Area(area_id="area_1718000000000_second", area_name="Second")
        third = area_with_image("Third", "third.png")
        document.areas.extend([first, second, third])

        graph.delete_area(document, first.area_id)

        assert document.areas[0] is second
        assert second.image_url.endswith("first.png")
        assert third.image_url.endswith("third.png")
        assert_multi_area_invariant(document)

    def test_delete_first_area_does_not_overwrite_existing_image(self):
        document = new_document()
        first = area_with_image("First", "first.png")
        second = area_with_image("Second", "second.png")
        third = area_with_image("Third", "third.png")
        document.areas.extend([first, second, third])

        graph.delete_area(document, first.area_id)

        assert second.image_url.endswith("second.png")

    def test_delete_down_to_one_area_moves_image_to_project(self):
        document = document_with_project_image("i0.jpg")
        kitchen = graph.add_area(document, "Kitchen", stored("k.png"))

        graph.delete_area(document, document.areas[0].area_id)

        assert document.areas == [kitchen]
        assert_single_area_invariant(document)
        assert document.image.url.endswith("k.png")

    def test_delete_unknown_area(self):
        document = document_with_project_image()
        before = snapshot(document)

        with pytest.raises(NotFoundError):
            graph.delete_area(document, "area_1718000000000_nope")
        assert snapshot(document) == before


# ══════════════════════════════════════════════════════════════════════════
# Hotspots
# ══════════════════════════════════════════════════════════════════════════


class TestHotspots:

    def setup_method(self):
        self.document = document_with_project_image("i0.jpg")
        self.parent = self.document.areas[0]

    def test_new_hotspot_creates_linked_child_area(self):
        result = graph.add_hotspot(self.document, self.parent.area_id, "Kitchen", "10.5", "20", stored("k1.png"))

        hotspot, child = result.hotspot, result.area
        assert result.hotspot_created and result.area_created
        assert ID_PATTERN.match(hotspot.hotspot_id)
        assert hotspot.parent_area_id == self.parent.id
        assert hotspot.child_area_id == child.area_id
        assert child.parent_hotspot_id == hotspot.hotspot_id
        assert (hotspot.x, hotspot.y) == (10.5, 20.0)
        assert child.area_name == "Kitchen"
        assert child.image_url.endswith("k1.png")
        assert hotspot.image_url.endswith("k1.png")
        assert_multi_area_invariant(self.document)
        assert self.parent.image_url.endswith("i0.jpg")

    def test_repeat_with_same_title_updates_in_place(self):
        first = graph.add_hotspot(self.document, self.parent.area_id, "Kitchen", 10, 20, stored("k1.png"))

        second = graph.add_hotspot(self.document, self.parent.id, "  kitchen ", 30, 40, stored("k2.png"))

        assert not second.hotspot_created and not second.area_created
        assert second.hotspot is first.hotspot
        assert second.area is first.area
        assert len(self.document.hotspots) == 1
        assert len(self.document.areas) == 2
        assert (second.hotspot.x, second.hotspot.y) == (30.0, 40.0)
        assert second.hotspot.title == "Kitchen"
        assert second.hotspot.image_url.endswith("k2.png")
        assert second.area.image_url.endswith("k2.png")

    def test_existing_area_with_matching_name_is_reused(self):
        bedroom = graph.add_area(self.document, "Bedroom", stored("bed.png"))

        result = graph.add_hotspot(self.document, self.parent.area_id, "BEDROOM", 1, 2, stored("bed2.png"))

        assert result.area is bedroom
        assert not result.area_created
        assert result.hotspot_created
        assert bedroom.image_url.endswith("bed2.png")
        assert bedroom.parent_hotspot_id == result.hotspot.hotspot_id

    def test_same_title_under_other_parent_is_a_new_hotspot(self):
        graph.add_hotspot(self.document, self.parent.area_id, "Kitchen", 1, 1, stored("k.png"))
        hall = graph.add_area(self.document, "Hall", stored("hall.png"))

        result = graph.add_hotspot(self.document, hall.area_id, "Kitchen", 2, 2, stored("k2.png"))

        assert result.hotspot_created
        assert not result.area_created
        assert len(self.document.hotspots) == 2

    def test_legacy_parent_reference_by_area_id_matches(self):
        legacy = Hotspot(
            hotspot_id="hotspot_1718000000000_legacy",
            title="Kitchen",
            x=1,
            y=1,
            parent_area_id=self.parent.area_id,
        )
        self.document.hotspots.append(legacy)

        result = graph.add_hotspot(self.document, self.parent.area_id, "kitchen", 5, 6, stored("k.png"))

        assert result.hotspot is legacy
        assert len(self.document.hotspots) == 1

    @pytest.mark.parametrize(
        "title, x, y",
        [
            (None, 1, 1),
            ("   ", 1, 1),
            ("Kitchen", None, 1),
            ("Kitchen", 1, ""),
            ("Kitchen", "left", 1),
        ],
    )
    def test_invalid_input_leaves_document_untouched(self, title, x, y):
        before = snapshot(self.document)

        with pytest.raises(ValidationError):
            graph.add_hotspot(self.document, self.parent.area_id, title, x, y, stored("k.png"))
        assert snapshot(self.document) == before

    def test_image_required(self):
        with pytest.raises(ValidationError, match="Image is required for hotspot"):
            graph.add_hotspot(self.document, self.parent.area_id, "Kitchen", 1, 1, None)

    def test_unknown_parent_area(self):
        before = snapshot(self.document)

        with pytest.raises(NotFoundError, match="parent area"):
            graph.add_hotspot(self.document, "area_1718000000000_nope", "Kitchen", 1, 1, stored("k.png"))
        assert snapshot(self.document) == before


# ══════════════════════════════════════════════════════════════════════════
# Info markers
# ══════════════════════════════════════════════════════════════════════════


class TestInfo:

    def setup_method(self):
        self.document = document_with_project_image()
        self.area = self.document.areas[0]

    def test_new_marker(self):
        result = graph.upsert_info(self.document, self.area.area_id, "  Oak floors ", "12", "7.5")

        assert result.created
        assert result.info.description == "Oak floors"
        assert result.info.area_id == self.area.id
        assert (result.info.x, result.info.y) == (12.0, 7.5)
        assert ID_PATTERN.match(result.info.info_id)

    def test_same_coordinates_overwrite(self):
        graph.upsert_info(self.document, self.area.area_id, "Oak floors", 12, 7.5)

        result = graph.upsert_info(self.document, self.area.id, "Walnut floors", "12.0", "7.5")

        assert not result.created
        assert len(self.document.info) == 1
        assert self.document.info[0].description == "Walnut floors"

    def test_different_coordinates_append(self):
        graph.upsert_info(self.document, self.area.area_id, "A", 1, 1)
        graph.upsert_info(self.document, self.area.area_id, "B", 1, 2)

        assert [i.description for i in self.document.info] == ["A", "B"]

    def test_coordinates_default_to_zero(self):
        result = graph.upsert_info(self.document, self.area.area_id, "Origin")

        assert (result.info.x, result.info.y) == (0.0, 0.0)

    def test_description_required(self):
        with pytest.raises(ValidationError, match="Description is required"):
            graph.upsert_info(self.document, self.area.area_id, "  ", 1, 1)
        assert self.document.info == []

    def test_unknown_area(self):
        with pytest.raises(NotFoundError):
            graph.upsert_info(self.document, "area_1718000000000_nope", "x", 1, 1)


# ══════════════════════════════════════════════════════════════════════════
# Combined area/hotspot delete
# ══════════════════════════════════════════════════════════════════════════


class TestAreaHotspotDelete:

    def setup_method(self):
        self.document = document_with_project_image()
        self.root = self.document.areas[0]
        kitchen = graph.add_hotspot(self.document, self.root.area_id, "Kitchen", 1, 1, stored("k.png"))
        self.kitchen_hotspot, self.kitchen = kitchen.hotspot, kitchen.area
        pantry = graph.add_hotspot(self.document, self.kitchen.area_id, "Pantry", 2, 2, stored("p.png"))
        self.pantry_hotspot, self.pantry = pantry.hotspot, pantry.area

    def test_by_area_removes_its_parent_hotspot(self):
        result = graph.delete_area_and_hotspot(self.document, area_ref=self.kitchen.area_id)

        assert result.area is self.kitchen
        assert result.hotspot is self.kitchen_hotspot
        assert self.kitchen not in self.document.areas
        assert self.kitchen_hotspot not in self.document.hotspots

    def test_by_hotspot_removes_its_child_area(self):
        result = graph.delete_area_and_hotspot(self.document, hotspot_ref=self.kitchen_hotspot.hotspot_id)

        assert result.area is self.kitchen
        assert result.hotspot is self.kitchen_hotspot
        assert [a.area_name for a in self.document.areas] == ["Maple Street", "Pantry"]

    def test_single_hop_only(self):
        graph.delete_area_and_hotspot(self.document, area_ref=self.kitchen.area_id)

        # The pantry hotspot lived on the kitchen; it and the pantry area survive
        assert self.pantry in self.document.areas
        assert self.pantry_hotspot in self.document.hotspots

    def test_requires_a_reference(self):
        with pytest.raises(ValidationError, match="Either areaId or hotspotId is required"):
            graph.delete_area_and_hotspot(self.document)

    def test_nothing_matched(self):
        before = snapshot(self.document)

        with pytest.raises(NotFoundError):
            graph.delete_area_and_hotspot(self.document, area_ref="area_x", hotspot_ref="hotspot_x")
        assert snapshot(self.document) == before

    def test_relocates_after_delete(self):
        graph.delete_area_and_hotspot(self.document, area_ref=self.pantry.area_id)
        graph.delete_area_and_hotspot(self.document, hotspot_ref=self.kitchen_hotspot.hotspot_id)

        assert_single_area_invariant(self.document)


# ══════════════════════════════════════════════════════════════════════════
# Items
# ══════════════════════════════════════════════════════════════════════════


class TestItems:

    def setup_method(self):
        self.document = document_with_project_image()
        self.living = self.document.areas[0]
        self.kitchen = graph.add_area(self.document, "Kitchen", stored("k.png"))

    def test_add_library_item_without_placement(self):
        result = graph.add_library_item(self.document, stored("sofa.png"), width="120", height=80)

        assert result.placed is None
        assert ID_PATTERN.match(result.item.item_id)
        assert (result.item.width, result.item.height) == (120.0, 80.0)
        assert result.item.image_type == "png"
        assert self.document.items == [result.item]

    def test_add_library_item_with_placement(self):
        result = graph.add_library_item(
            self.document, stored("sofa.png"), 100, 50, area_ref=self.kitchen.area_id, x="5", y=6, rotation=90
        )

        placed = result.placed
        assert placed is not None
        assert self.kitchen.items == [placed]
        assert placed.item_id == result.item.item_id
        assert placed.image_url == result.item.image_url
        assert (placed.x, placed.y, placed.rotation) == (5.0, 6.0, 90.0)
        assert (placed.width, placed.height) == (100.0, 50.0)

    def test_unknown_area_skips_placement(self):
        result = graph.add_library_item(self.document, stored("sofa.png"), area_ref="area_missing")

        assert result.placed is None
        assert len(self.document.items) == 1

    def test_place_item_defaults_to_library_size(self):
        item = graph.add_library_item(self.document, stored("lamp.png"), 30, 90).item

        instance = graph.place_item(self.document, self.living.id, item.item_id, x=1, y=2)

        assert ID_PATTERN.match(instance.instance_id)
        assert (instance.width, instance.height) == (30.0, 90.0)
        assert instance.rotation == 0.0
        assert self.living.items == [instance]

    def test_place_item_size_override_and_flips(self):
        item = graph.add_library_item(self.document, stored("lamp.png"), 30, 90).item

        instance = graph.place_item(
            self.document, self.living.area_id, item.item_id, width=15, height="45", flip_x=True
        )

        assert (instance.width, instance.height) == (15.0, 45.0)
        assert instance.flip_x and not instance.flip_y

    def test_place_item_requires_item_id(self):
        with pytest.raises(ValidationError, match="itemId is required"):
            graph.place_item(self.document, self.living.area_id, None)

    def test_place_item_unknown_item(self):
        with pytest.raises(NotFoundError, match="library item"):
            graph.place_item(self.document, self.living.area_id, "item_missing")

    def test_place_item_unknown_area(self):
        item = graph.add_library_item(self.document, stored("lamp.png")).item

        with pytest.raises(NotFoundError):
            graph.place_item(self.document, "area_missing", item.item_id)

    def test_update_instance(self):
        item = graph.add_library_item(self.document, stored("lamp.png"), 30, 90).item
        instance = graph.place_item(self.document, self.living.area_id, item.item_id)

        updated = graph.update_item_instance(
            self.document, self.living.area_id, instance.instance_id, x="40", rotation=45, flip_y=True
        )

        assert updated is instance
        assert (instance.x, instance.y, instance.rotation) == (40.0, 0.0, 45.0)
        assert instance.flip_y
        assert instance.width == 30.0

    def test_update_instance_unknown(self):
        with pytest.raises(NotFoundError, match="item instance"):
            graph.update_item_instance(self.document, self.living.area_id, "inst_missing", x=1)

    def test_update_instance_rejects_unknown_fields(self):
        with pytest.raises(ValidationError, match="Unsupported fields"):
            graph.update_item_instance(self.document, self.living.area_id, "inst_x", item_id="other")

    def test_delete_library_item_cascades_to_every_area(self):
        sofa = graph.add_library_item(self.document, stored("sofa.png")).item
        lamp = graph.add_library_item(self.document, stored("lamp.png")).item
        graph.place_item(self.document, self.living.area_id, sofa.item_id)
        graph.place_item(self.document, self.kitchen.area_id, sofa.item_id)
        graph.place_item(self.document, self.kitchen.area_id, sofa.item_id)
        keep = graph.place_item(self.document, self.kitchen.area_id, lamp.item_id)

        result = graph.delete_library_item(self.document, sofa.item_id)

        assert result.instances_removed == 3
        assert self.document.items == [lamp]
        assert self.living.items == []
        assert self.kitchen.items == [keep]

    def test_delete_library_item_unknown(self):
        with pytest.raises(NotFoundError):
            graph.delete_library_item(self.document, "item_missing")

    def test_delete_instance_keeps_library_item(self):
        sofa = graph.add_library_item(self.document, stored("sofa.png")).item
        first = graph.place_item(self.document, self.kitchen.area_id, sofa.item_id)
        second = graph.place_item(self.document, self.kitchen.area_id, sofa.item_id)

        removed = graph.delete_item_instance(self.document, self.kitchen.area_id, first.instance_id)

        assert removed is first
        assert self.kitchen.items == [second]
        assert self.document.items == [sofa]

    def test_delete_instance_unknown(self):
        with pytest.raises(NotFoundError):
            graph.delete_item_instance(self.document, self.kitchen.area_id, "inst_missing")


# ══════════════════════════════════════════════════════════════════════════
# Editor walkthroughs
# ══════════════════════════════════════════════════════════════════════════


class TestWalkthroughs:

    def test_project_image_then_second_area_then_delete(self):
        document = document_with_project_image("i0.jpg")
        auto_area = document.areas[0]
        assert document.image.url.endswith("i0.jpg")
        assert auto_area.image_url.endswith("i0.jpg")

        kitchen = graph.add_area(document, "Kitchen", stored("i1.png"))
        assert_multi_area_invariant(document)
        assert auto_area.image_url.endswith("i0.jpg")
        assert kitchen.image_url.endswith("i1.png")

        graph.delete_area(document, kitchen.area_id)
        assert_single_area_invariant(document)
        assert document.image.url.endswith("i0.jpg")
        assert document.image.mime_type == "image/jpeg"

    def test_hotspot_twice_then_info_twice(self):
        document = document_with_project_image("i0.jpg")
        a = document.areas[0]

        first = graph.add_hotspot(document, a.area_id, "Kitchen", 10, 20, stored("i1.png"))
        assert len(document.areas) == 2
        assert first.area.parent_hotspot_id == first.hotspot.hotspot_id
        assert first.hotspot.child_area_id == first.area.area_id

        second = graph.add_hotspot(document, a.area_id, "kitchen ", 30, 40, stored("i2.png"))
        assert len(document.areas) == 2
        assert len(document.hotspots) == 1
        assert (second.hotspot.x, second.hotspot.y) == (30.0, 40.0)
        assert second.area.image_url.endswith("i2.png")

        graph.upsert_info(document, a.area_id, "Granite", 5, 5)
        graph.upsert_info(document, a.area_id, "Marble", "5", "5")
        assert len(document.info) == 1
        assert document.info[0].description == "Marble"

        views = graph.hotspots_in_area(document, a)
        assert views == [second.hotspot]
        assert graph.info_in_area(document, a) == document.info
        assert graph.hotspots_in_area(document, second.area) == []


class TestCoercion:

    @pytest.mark.parametrize("value, expected", [(3, 3.0), ("4.5", 4.5), (" 7 ", 7.0), (0, 0.0)])
    def test_numbers(self, value, expected):
        assert graph.coerce_number(value, "x") == expected

    @pytest.mark.parametrize("value", ["abc", "nan", "inf", True])
    def test_rejects(self, value):
        with pytest.raises(ValidationError):
            graph.coerce_number(value, "x")

    def test_default(self):
        assert graph.coerce_number(None, "x", default=0.0) == 0.0
        assert graph.coerce_number("", "x", default=1.0) == 1.0

    def test_info_marker_model_accepts_numeric_strings(self):
        marker = InfoMarker.model_validate({"description": "d", "x": "3", "y": 4, "areaId": "abc"})
        assert (marker.x, marker.y) == (3.0, 4.0)
