"""Turn CHIP-8 frames into RGB images and video."""
import time
from typing import Iterator, Optional, Sequence, Tuple

import cv2
import numpy as np

from chix8.constants import SCREEN_WIDTH, SCREEN_HEIGHT

RGB = Tuple[int, int, int]

# on, off and "on while the sound timer runs"
COLOR_SCHEMES = {
    "chix8": ((250, 250, 16), (16, 16, 16), (16, 250, 16)),
    "classic": ((0, 255, 0), (0, 0, 0), (255, 176, 0)),
    "amber": ((255, 176, 0), (0, 0, 0), (255, 96, 0)),
    "white": ((255, 255, 255), (0, 0, 0), (255, 255, 0)),
    "blue": ((0, 255, 255), (0, 0, 64), (255, 255, 255)),
    "retro": ((255, 255, 0), (64, 0, 64), (255, 128, 255)),
}

PHOSPHOR_DECAY = 0.8


def create_color_scheme(scheme: str = "chix8", sound_active: bool = False) -> Tuple[RGB, RGB]:
    """Look up the (on, off) colours of a named scheme.

    Args:
        scheme: One of ``COLOR_SCHEMES``
        sound_active: Use the scheme's beep colour for lit pixels

    Raises:
        ValueError: If the scheme is unknown
    """
    try:
        on_color, off_color, sound_color = COLOR_SCHEMES[scheme]
    except KeyError:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES)}"
        ) from None
    return (sound_color if sound_active else on_color), off_color


def _upscale(image: np.ndarray, scale: int) -> np.ndarray:
    if scale > 1:
        image = np.repeat(np.repeat(image, scale, axis=0), scale, axis=1)
    return image


def chip8_display_to_rgb(
    display: np.ndarray,
    scale: int = 8,
    on_color: RGB = (0, 255, 0),
    off_color: RGB = (0, 0, 0),
) -> np.ndarray:
    """Colour a (32, 64) boolean display, indexed [row, column].

    Returns:
        uint8 array of shape (32 * scale, 64 * scale, 3)
    """
    lit = np.asarray(display, dtype=np.bool_)
    rgb = np.where(lit[..., None], np.array(on_color, np.uint8), np.array(off_color, np.uint8))
    return _upscale(rgb.astype(np.uint8), scale)


def _check_frames(frames) -> np.ndarray:
    frames = np.asarray(frames)
    if frames.ndim != 3 or frames.shape[1:] != (SCREEN_HEIGHT, SCREEN_WIDTH):
        raise ValueError(f"Expected frames of shape (N, {SCREEN_HEIGHT}, {SCREEN_WIDTH}), got {frames.shape}")
    return frames


def _blend(intensity: np.ndarray, on_color: RGB, off_color: RGB) -> np.ndarray:
    on = np.asarray(on_color, np.float32)
    off = np.asarray(off_color, np.float32)
    return (off + intensity[..., None] * (on - off)).astype(np.uint8)


def iter_rgb_frames(
    frames: np.ndarray,
    sound: Optional[Sequence[bool]] = None,
    scale: int = 8,
    color_scheme: str = "chix8",
    persistence: bool = True,
) -> Iterator[np.ndarray]:
    """Yield one RGB image per display frame.

    With ``persistence`` each pixel fades out over a few frames instead of
    going dark at once, which hides the flicker of XOR-drawn sprites.
    """
    frames = _check_frames(frames)
    glow = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=np.float32)
    for i, frame in enumerate(frames):
        lit = frame.astype(np.float32)
        glow = np.maximum(glow * PHOSPHOR_DECAY, lit) if persistence else lit
        beeping = bool(sound[i]) if sound is not None else False
        on_color, off_color = create_color_scheme(color_scheme, sound_active=beeping)
        yield _upscale(_blend(glow, on_color, off_color), scale)


def create_video(
        frames: np.ndarray,
        filename: str = None,
        fps: float = 60.0,
        scale: int = 8,
        color_scheme: str = "chix8",
        persistence: bool = True,
        display: bool = False,
        sound: Optional[Sequence[bool]] = None,
) -> None:
    """Save and/or play back a sequence of CHIP-8 frames.

    Args:
        frames: Boolean array of shape (N, 32, 64)
        filename: MP4 file to write, if any
        fps: Frame rate
        scale: Upscaling factor
        color_scheme: Name from ``COLOR_SCHEMES``
        persistence: Simulate phosphor fade
        display: Show the frames in a window ('q'/Esc quits, space pauses)
        sound: Per-frame sound flags, tinting lit pixels while set
    """
    if filename is None and not display:
        return
    frames = _check_frames(frames)
    rgb_frames = iter_rgb_frames(frames, sound, scale, color_scheme, persistence)
    size = (SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale)

    writer = cv2.VideoWriter(filename, cv2.VideoWriter_fourcc(*'mp4v'), fps, size) if filename else None
    window_name = "CHIP-8 (q=quit, space=pause)"
    if display:
        cv2.namedWindow(window_name, cv2.WINDOW_AUTOSIZE)

    try:
        for rgb in rgb_frames:
            started = time.time()
            bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
            if writer:
                writer.write(bgr)
            if display and not _show(window_name, bgr, 1.0 / fps - (time.time() - started)):
                break
    finally:
        if writer:
            writer.release()
        if display:
            cv2.destroyAllWindows()


def _show(window_name: str, image: np.ndarray, remaining: float) -> bool:
    """Show one frame and handle keys. Returns False when the user quits."""
    cv2.imshow(window_name, image)
    key = cv2.waitKey(max(1, int(remaining * 1000))) & 0xFF
    if key in (ord('q'), 27):
        return False
    if key == ord(' '):
        while True:
            key = cv2.waitKey(30) & 0xFF
            if key == ord(' '):
                return True
            if key in (ord('q'), 27):
                return False
    return True
