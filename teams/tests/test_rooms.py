from django.test import SimpleTestCase

from core.exceptions import RoomFull, RoomRequired, UnknownRoom
from teams import rooms


class RoomCatalogTests(SimpleTestCase):
    def test_catalog_shape(self):
        ordinary = [r for r in rooms.ROOMS if r.max_teams == rooms.ORDINARY_ROOM_CAPACITY]
        # 29 numbered rooms + Library Conference Room
        self.assertEqual(len(ordinary), 30)
        self.assertEqual(rooms.get_room("Library").max_teams, 999)
        self.assertEqual(rooms.get_room("unassigned").max_teams, 999)
        self.assertEqual(rooms.get_room("124").name, "Room 124")

    def test_selectable_rooms_exclude_unassigned(self):
        ids = [r.id for r in rooms.selectable_rooms()]
        self.assertNotIn("unassigned", ids)
        self.assertIn("Library", ids)
        self.assertIn("Library Conference Room", ids)

    def test_board_bucket(self):
        self.assertEqual(rooms.board_bucket("124"), "124")
        self.assertEqual(rooms.board_bucket("TBD"), "unassigned")
        self.assertEqual(rooms.board_bucket(""), "unassigned")
        self.assertEqual(rooms.board_bucket(None), "unassigned")
        self.assertEqual(rooms.board_bucket("Room 999"), "unassigned")


class AssignPolicyTests(SimpleTestCase):
    def test_solo_team_always_goes_to_overflow(self):
        self.assertEqual(rooms.assign(1, "124", {"124": 0}), "Library")
        self.assertEqual(rooms.assign(1, None, {}), "Library")
        # capacity never checked for the overflow room
        self.assertEqual(rooms.assign(1, "124", {"Library": 5000}), "Library")

    def test_room_required_for_multi_member_team(self):
        with self.assertRaises(RoomRequired):
            rooms.assign(3, None, {})
        with self.assertRaises(RoomRequired):
            rooms.assign(3, "", {})

    def test_unknown_room(self):
        with self.assertRaises(UnknownRoom):
            rooms.assign(2, "999", {})
        with self.assertRaises(UnknownRoom):
            rooms.assign(2, "unassigned", {})

    def test_ordinary_room_admits_two(self):
        self.assertEqual(rooms.assign(2, "124", {}), "124")
        self.assertEqual(rooms.assign(2, "124", {"124": 1}), "124")
        with self.assertRaises(RoomFull):
            rooms.assign(2, "124", {"124": 2})

    def test_occupancy_of_other_rooms_is_ignored(self):
        self.assertEqual(rooms.assign(4, "201", {"124": 2}), "201")

    def test_library_is_unbounded_for_bigger_teams(self):
        self.assertEqual(rooms.assign(4, "Library", {"Library": 500}), "Library")

    def test_unassigned_only_for_admin_moves(self):
        self.assertEqual(
            rooms.assign(3, "unassigned", {}, allow_unassigned=True),
            "unassigned",
        )
