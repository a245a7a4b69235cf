"""Course aggregation: XP dedup, badge selection and ordering.
Run: pytest -q
"""
from lingocard.aggregate import (
    SPECIAL_CODES, SPECIAL_XP, BadgePolicy, aggregate, course_totals, resolve_total_xp,
)
from lingocard.models import CourseEntry, UserStats


def c(learning, from_lang="en", xp=0):
    return CourseEntry(learning, from_lang, xp)


def test_duplicate_courses_counted_once():
    badges, total = aggregate([c("es", "en", 1500), c("es", "en", 1500)], False)
    assert total == 1500
    assert badges.codes == ("es",)


def test_duplicate_pair_keeps_max_not_sum():
    courses = [c("es", "en", 900), c("es", "en", 1500), c("es", "fr", 200)]
    assert course_totals(courses) == {("es", "en"): 1500, ("es", "fr"): 200}
    _, total = aggregate(courses, False)
    assert total == 1700


def test_zero_xp_course_gets_no_badge():
    badges, total = aggregate([c("fr", "en", 300), c("de", "en", 0)], False)
    assert badges.codes == ("fr",)
    assert total == 300


def test_no_courses():
    badges, total = aggregate([], True, BadgePolicy(special_codes=()))
    assert len(badges) == 0
    assert total == 0


def test_sorted_by_xp_with_first_seen_xp_per_language():
    courses = [c("fr", "en", 100), c("es", "en", 500), c("fr", "de", 9000), c("ja", "en", 500)]
    badges, _ = aggregate(courses, False)
    # fr keeps its first-seen 100 XP; es/ja tie keeps input order
    assert badges.codes == ("es", "ja", "fr")
    assert [b.xp for b in badges] == [500, 500, 100]


def test_specials_only_when_requested():
    courses = [c("es", "en", 10)]
    badges, _ = aggregate(courses, False)
    assert not set(SPECIAL_CODES) & set(badges.codes)

    badges, _ = aggregate(courses, True)
    assert badges.codes == ("es",) + SPECIAL_CODES
    specials = [b for b in badges if b.special]
    assert [b.code for b in specials] == list(SPECIAL_CODES)
    assert all(b.xp == SPECIAL_XP for b in specials)


def test_earned_special_is_not_duplicated():
    badges, _ = aggregate([c("music", "en", 40), c("es", "en", 10)], True)
    assert badges.codes.count("music") == 1
    assert badges.codes == ("music", "es", "math", "chess")
    assert not [b for b in badges if b.code == "music"][0].special


def test_specials_first_policy():
    badges, _ = aggregate([c("es", "en", 10)], True, BadgePolicy(special_position="first"))
    assert badges.codes == SPECIAL_CODES + ("es",)


def test_self_pair_rules():
    courses = [c("en", "en", 50), c("es", "es", 60), c("de", "en", 5)]
    same, total = aggregate(courses, False, BadgePolicy(self_pair="same"))
    assert same.codes == ("de",)
    # self pairs still count towards total XP
    assert total == 115

    english, _ = aggregate(courses, False, BadgePolicy(self_pair="english"))
    assert english.codes == ("es", "de")

    none, _ = aggregate(courses, False, BadgePolicy(self_pair="none"))
    assert none.codes == ("es", "en", "de")


def test_selection_capped_and_unique():
    courses = [c(f"l{i:02d}", "en", 1000 - i) for i in range(60)]
    courses += [c("l00", "fr", 5000)]
    badges, _ = aggregate(courses, True)
    assert len(badges) == 50
    assert len(set(badges.codes)) == 50
    # real badges crowd out specials
    assert not any(b.special for b in badges)


def test_special_position_first_survives_cap():
    courses = [c(f"l{i:02d}", "en", 100) for i in range(55)]
    badges, _ = aggregate(courses, True, BadgePolicy(special_position="first"))
    assert badges.codes[:3] == SPECIAL_CODES
    assert len(badges) == 50


def test_resolve_total_xp_policy():
    stats = UserStats(handle="x", display_name="x", total_xp=9999)
    assert resolve_total_xp(stats, 1500) == 1500
    assert resolve_total_xp(stats, 1500, "upstream") == 9999
    empty = UserStats(handle="x", display_name="x")
    assert resolve_total_xp(empty, 1500, "upstream") == 1500
