from backend.models.schemas import BoundingBox, CropWindow, EmotionScore
from backend.services.change_detectors import (
    is_crop_change_significant,
    is_significant_emotion_change,
    is_significant_movement,
    primary_emotion,
)


def _box(left, top):
    return BoundingBox(left=left, top=top, width=0.1, height=0.1)


def _emotions(*pairs):
    return [EmotionScore(type=t, confidence=c) for t, c in pairs]


def test_large_horizontal_jump_is_significant():
    assert is_significant_movement(_box(0.85, 0.1), _box(0.1, 0.1))


def test_moderate_jump_is_not_significant():
    assert not is_significant_movement(_box(0.5, 0.1), _box(0.1, 0.1))


def test_vertical_jump_counts_too():
    assert is_significant_movement(_box(0.1, 0.9), _box(0.1, 0.1))


def test_movement_threshold_is_configurable():
    assert is_significant_movement(_box(0.5, 0.1), _box(0.1, 0.1), threshold=0.3)


def test_primary_emotion_picks_highest_confidence():
    emotions = _emotions(("CALM", 40), ("HAPPY", 90), ("SAD", 10))
    assert primary_emotion(emotions).type == "HAPPY"


def test_primary_emotion_tie_takes_later_entry():
    assert primary_emotion(_emotions(("CALM", 50), ("HAPPY", 50))).type == "HAPPY"


def test_tied_new_emotions_can_switch_primary():
    prev = _emotions(("HAPPY", 96))
    new = _emotions(("HAPPY", 97), ("SAD", 97))
    assert primary_emotion(new).type == "SAD"
    assert is_significant_emotion_change(prev, new)


def test_primary_emotion_empty():
    assert primary_emotion([]) is None


def test_confident_emotion_switch_is_significant():
    assert is_significant_emotion_change(_emotions(("HAPPY", 96)), _emotions(("SAD", 97)))


def test_low_confidence_previous_emotion_is_not_significant():
    assert not is_significant_emotion_change(_emotions(("HAPPY", 80)), _emotions(("SAD", 97)))


def test_same_emotion_is_not_significant():
    assert not is_significant_emotion_change(_emotions(("HAPPY", 99)), _emotions(("HAPPY", 98)))


def test_empty_emotion_lists_are_not_significant():
    assert not is_significant_emotion_change([], _emotions(("SAD", 97)))
    assert not is_significant_emotion_change(_emotions(("SAD", 97)), [])


def test_crop_change_within_tolerance():
    reference = CropWindow(x=100, y=100, w=200, h=200)
    assert not is_crop_change_significant(150, 120, 210, 190, reference)


def test_crop_offset_beyond_tolerance():
    reference = CropWindow(x=100, y=100, w=200, h=200)
    # 0.6 * 200 = 120 px
    assert is_crop_change_significant(221, 100, 200, 200, reference)


def test_crop_size_beyond_tolerance():
    reference = CropWindow(x=100, y=100, w=200, h=200)
    assert is_crop_change_significant(100, 100, 200, 330, reference)
