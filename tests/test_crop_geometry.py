from backend.models.schemas import BoundingBox, CropWindow, ReframeSettings
from backend.services.crop_geometry import calculate_crop_window


def test_crop_is_padded_and_centred_on_face():
    box = BoundingBox(left=0.4, top=0.4, width=0.1, height=0.1)
    crop = calculate_crop_window(box, 1000, 1000)
    # face 100x100 centred at (450, 450), padding 1.0 doubles it
    assert crop == CropWindow(x=350, y=350, w=200, h=200)


def test_crop_is_clamped_to_right_edge():
    box = BoundingBox(left=0.95, top=0.4, width=0.1, height=0.1)
    crop = calculate_crop_window(box, 1000, 800)
    assert crop.x + crop.w <= 1000
    assert crop.x >= 0


def test_crop_is_clamped_to_low_edges():
    box = BoundingBox(left=0.0, top=0.0, width=0.2, height=0.2)
    crop = calculate_crop_window(box, 1000, 1000)
    assert crop.x == 0
    assert crop.y == 0


def test_crop_never_exceeds_frame():
    box = BoundingBox(left=0.1, top=0.1, width=0.8, height=0.9)
    crop = calculate_crop_window(box, 640, 480)
    assert crop.w == 640
    assert crop.h == 480
    assert (crop.x, crop.y) == (0, 0)


def test_odd_frame_width_keeps_crop_inside():
    box = BoundingBox(left=0.9, top=0.5, width=0.05, height=0.1)
    crop = calculate_crop_window(box, 1001, 721)
    assert crop.x + crop.w <= 1001
    assert crop.y + crop.h <= 721


def test_significant_jump_adds_padding():
    last = BoundingBox(left=0.05, top=0.4, width=0.1, height=0.1)
    box = BoundingBox(left=0.8, top=0.4, width=0.1, height=0.1)
    steady = calculate_crop_window(box, 1000, 1000)
    jumped = calculate_crop_window(box, 1000, 1000, last_face_position=last)
    assert steady.w == 200
    assert jumped.w == 250


def test_small_change_returns_previous_crop():
    last_crop = CropWindow(x=395, y=405, w=190, h=210)
    box = BoundingBox(left=0.4, top=0.4, width=0.1, height=0.1)
    crop = calculate_crop_window(box, 1000, 1000, last_crop=last_crop)
    assert crop is last_crop


def test_large_change_replaces_previous_crop():
    last_crop = CropWindow(x=0, y=0, w=100, h=100)
    box = BoundingBox(left=0.7, top=0.7, width=0.1, height=0.1)
    crop = calculate_crop_window(box, 1000, 1000, last_crop=last_crop)
    assert crop == CropWindow(x=650, y=650, w=200, h=200)


def test_padding_base_is_configurable():
    box = BoundingBox(left=0.4, top=0.4, width=0.1, height=0.1)
    crop = calculate_crop_window(box, 1000, 1000, settings=ReframeSettings(padding_factor_base=0.0))
    assert crop == CropWindow(x=400, y=400, w=100, h=100)


def test_half_pixel_offsets_round_up():
    # face 125x125 at 375: crop 250 wide starting at 312.5
    box = BoundingBox(left=0.375, top=0.375, width=0.125, height=0.125)
    crop = calculate_crop_window(box, 1000, 1000)
    assert crop == CropWindow(x=313, y=313, w=250, h=250)


def test_half_pixel_size_rounds_up():
    # 6.25 px tall face, padded to 12.5 px
    box = BoundingBox(left=0.5, top=0.5, width=0.0625, height=0.0625)
    crop = calculate_crop_window(box, 1000, 100)
    assert crop.h == 13
