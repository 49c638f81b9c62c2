import pytest

from gestu_writer.ml.libras.features import finger_states
from gestu_writer.ml.libras.static_signs import (
    MODE_LETTERS, MODE_NUMBERS, classify_static, thumb_pinky_spread,
)
from gestu_writer.ml.libras.types import (
    Handedness, MissingHandednessError, Pose, TokenKind,
)

from conftest import make_pose


def _letter(pose, value, confidence):
    token = classify_static(pose)
    assert token is not None
    assert token.kind == TokenKind.LETTER
    assert token.value == value
    assert token.confidence == pytest.approx(confidence)


def test_fist_with_thumb_up_beside_index_is_a(right_fist_a):
    _letter(right_fist_a, "A", 0.90)


def test_raised_thumb_touching_curled_index_is_still_a():
    # кончик указательного подогнут к большому: A проверяется раньше кольца
    pose = make_pose(overrides={8: (0.45, 0.57), 4: (0.46, 0.56)})
    _letter(pose, "A", 0.90)


def test_thumb_across_fist_is_s():
    _letter(make_pose(overrides={4: (0.52, 0.64)}), "S", 0.80)


def test_claw_with_tucked_thumb_is_e():
    pose = make_pose(overrides={
        8: (0.45, 0.55), 12: (0.50, 0.53), 16: (0.55, 0.55), 20: (0.60, 0.58),
        4: (0.50, 0.62),
    })
    _letter(pose, "E", 0.75)


def test_flat_hand_with_tucked_thumb_is_b():
    _letter(make_pose(index=True, middle=True, ring=True, pinky=True), "B", 0.90)


def test_circle_is_o_when_hand_up():
    pose = make_pose(overrides={4: (0.51, 0.56), 8: (0.50, 0.55), 12: (0.52, 0.57)})
    _letter(pose, "O", 0.85)


def test_circle_is_p_when_index_tip_well_below_wrist():
    pose = make_pose(overrides={0: (0.50, 0.30), 4: (0.51, 0.56), 8: (0.50, 0.55), 12: (0.52, 0.57)})
    _letter(pose, "P", 0.80)


def test_three_fingers_with_open_thumb_is_c():
    _letter(make_pose(thumb=True, index=True, middle=True, ring=True), "C", 0.70)


def test_index_only_is_d_and_with_thumb_is_l():
    _letter(make_pose(index=True), "D", 0.90)
    _letter(make_pose(index=True, thumb=True), "L", 0.95)


def test_pinky_only_splits_i_and_y_by_thumb_spread():
    # большой близко к мизинцу по X -> I
    _letter(make_pose(pinky=True, overrides={4: (0.50, 0.66)}), "I", 0.90)
    # большой далеко (|0.41 - 0.60| > 0.15) -> Y
    _letter(make_pose(pinky=True), "Y", 0.90)


def test_close_fingers_are_u_and_spread_flips_to_v():
    u = make_pose(index=True, middle=True, overrides={8: (0.49, 0.38), 12: (0.51, 0.38)})
    _letter(u, "U", 0.88)

    v = make_pose(index=True, middle=True, overrides={8: (0.465, 0.38), 12: (0.535, 0.38)})
    _letter(v, "V", 0.90)


def test_two_fingers_in_grey_zone_is_weak_v():
    pose = make_pose(index=True, middle=True, overrides={8: (0.48, 0.38), 12: (0.52, 0.38)})
    _letter(pose, "V", 0.75)


def test_three_fingers_without_thumb_is_w():
    _letter(make_pose(index=True, middle=True, ring=True), "W", 0.90)


def test_open_thumb_and_pinky_goes_through_pinky_rule():
    # широкий разнос по X -> Y из правила мизинца
    _letter(make_pose(thumb=True, pinky=True), "Y", 0.90)


def test_hang_loose_with_moderate_spread_is_y():
    # разнос 0.18 по X: больше 0.15, но меньше 0.20 по расстоянию
    pose = make_pose(pinky=True, overrides={3: (0.45, 0.55), 4: (0.42, 0.47)})
    assert finger_states(pose.landmarks, pose.handedness).thumb
    _letter(pose, "Y", 0.90)


def test_open_thumb_near_pinky_is_i():
    pose = make_pose(pinky=True, overrides={3: (0.56, 0.64), 4: (0.52, 0.62)})
    assert finger_states(pose.landmarks, pose.handedness).thumb
    _letter(pose, "I", 0.90)


def test_thumb_pinky_spread_confirms_y_by_distance():
    pose = make_pose(thumb=True, pinky=True)
    f = finger_states(pose.landmarks, pose.handedness)
    token = thumb_pinky_spread(pose.landmarks, f)
    assert (token.value, token.confidence) == ("Y", pytest.approx(0.85))

    near = make_pose(pinky=True, overrides={3: (0.56, 0.64), 4: (0.52, 0.62)})
    assert thumb_pinky_spread(near.landmarks, finger_states(near.landmarks, near.handedness)) is None


def test_closed_index_family():
    # большой на кончике указательного -> F
    _letter(make_pose(middle=True, ring=True, pinky=True, overrides={4: (0.46, 0.60)}), "F", 0.85)
    # большой у PIP указательного -> T
    _letter(make_pose(middle=True, ring=True, pinky=True, overrides={4: (0.47, 0.52)}), "T", 0.80)
    # ни то ни другое -> F с низкой уверенностью
    _letter(make_pose(middle=True, ring=True, pinky=True), "F", 0.70)


def test_confident_digit_preempts_letter():
    # четыре пальца + большой у кончика среднего: "8" перебивает "B"
    pose = make_pose(index=True, middle=True, ring=True, pinky=True, overrides={4: (0.50, 0.42)})
    token = classify_static(pose)
    assert token.kind == TokenKind.NUMBER
    assert token.value == 8


def test_weak_digit_is_only_a_fallback():
    # "0" (0.85) не перебивает буквы, но ни одна буква не подошла
    pose = make_pose(
        thumb=True, index=True, middle=True, ring=True, pinky=True,
        overrides={3: (0.45, 0.50), 4: (0.43, 0.45)},
    )
    token = classify_static(pose)
    assert token.kind == TokenKind.NUMBER
    assert token.value == 0
    assert token.confidence == pytest.approx(0.85)


def test_modes():
    open_hand = make_pose(thumb=True, index=True, middle=True, ring=True, pinky=True)
    assert classify_static(open_hand).value == 5
    assert classify_static(open_hand, MODE_LETTERS) is None

    u = make_pose(index=True, middle=True, overrides={8: (0.49, 0.38), 12: (0.51, 0.38)})
    token = classify_static(u, MODE_NUMBERS)
    assert token.kind == TokenKind.NUMBER
    assert token.value == 2

    with pytest.raises(ValueError):
        classify_static(u, "cyrillic")


def test_left_hand_mirrors_thumb_rules():
    # зеркалим правую "L" по X
    right = make_pose(index=True, thumb=True)
    mirrored = Pose(
        tuple(p._replace(x=1.0 - p.x) for p in right.landmarks),
        Handedness("Left", 0.95),
    )
    assert classify_static(mirrored).value == "L"


def test_missing_landmarks_is_no_detection():
    assert classify_static(None) is None
    assert classify_static(Pose((), None)) is None
    short = make_pose()
    assert classify_static(Pose(short.landmarks[:10], short.handedness)) is None


def test_missing_handedness_fails_fast():
    with pytest.raises(MissingHandednessError):
        classify_static(make_pose(label=None))
    with pytest.raises(MissingHandednessError):
        classify_static(make_pose(label="Both"))


def test_every_token_confidence_in_unit_range():
    poses = [
        make_pose(**{k: True for k in combo})
        for combo in (
            (), ("index",), ("thumb",), ("pinky",), ("index", "middle"),
            ("index", "middle", "ring"), ("thumb", "index", "middle"),
            ("middle", "ring", "pinky"), ("index", "middle", "ring", "pinky"),
            ("thumb", "index", "middle", "ring", "pinky"),
        )
    ]
    for mode in ("mixed", "letters", "numbers"):
        for pose in poses:
            token = classify_static(pose, mode)
            if token is not None:
                assert 0.0 <= token.confidence <= 1.0
