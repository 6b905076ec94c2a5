"""Rendering utilities for SUPER-CHIP frames."""
import time

import numpy as np
from typing import Sequence, Tuple
import cv2

from PIL import Image

from superchip.constants import SCREEN_WIDTH, SCREEN_HEIGHT


def display_to_rgb(
    display: np.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert a boolean canvas to an RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (128, 64) indexed ``[x, y]``
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (64*scale, 128*scale, 3) with uint8 values
    """
    pixels = np.asarray(display, dtype=np.bool_)
    if pixels.shape != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(f"Expected display shape {(SCREEN_WIDTH, SCREEN_HEIGHT)}, got {pixels.shape}")

    # (width, height) -> image rows
    pixels = pixels.T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes.

    Args:
        scheme: Color scheme name ("classic", "amber", "white", "blue", "retro", "hp48")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
        "hp48": ((34, 40, 30), (150, 166, 132)),  # Calculator LCD
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def save_frame(display: np.ndarray, filename: str, scale: int = 4, color_scheme: str = "classic") -> None:
    """Write one canvas to an image file (format from the extension)."""
    on_color, off_color = create_color_scheme(color_scheme)
    Image.fromarray(display_to_rgb(display, scale, on_color, off_color)).save(filename)


class FrameRecorder:
    """Screen sink that keeps every frame it receives."""

    def __init__(self):
        self.frames = []

    def __call__(self, frame: np.ndarray):
        self.frames.append(np.array(frame, dtype=np.bool_))

    def __len__(self):
        return len(self.frames)


def create_video(
        frames: Sequence[np.ndarray],
        filename: str = None,
        fps: float = 60.0,
        scale: int = 4,
        color_scheme: str = "classic",
        persistence: bool = True,
        display: bool = False
) -> None:
    """Display and/or save a frame sequence with optional phosphor persistence.

    Args:
        frames: Canvases of shape (128, 64), e.g. ``FrameRecorder.frames``
        filename: If provided, save video to this MP4 file
        fps: Video frame rate
        scale: Upscaling factor
        color_scheme: Color scheme for rendering
        persistence: Enable phosphor screen simulation (smooth fading)
        display: If True, show video in window (press 'q' to quit, space to pause)
    """
    if not len(frames) or (filename is None and not display):
        return
    displays = np.asarray(frames, dtype=np.bool_)
    if len(displays.shape) != 3 or displays.shape[1:] != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(f"Expected frames of shape (N, {SCREEN_WIDTH}, {SCREEN_HEIGHT}), got {displays.shape}")

    height, width = SCREEN_HEIGHT * scale, SCREEN_WIDTH * scale
    on_color, off_color = np.array(create_color_scheme(color_scheme))

    writer = None
    if filename:
        fourcc = cv2.VideoWriter_fourcc(*'mp4v')
        writer = cv2.VideoWriter(filename, fourcc, fps, (width, height))

    if display:
        window_name = "SUPER-CHIP (q=quit, space=pause)"
        cv2.namedWindow(window_name, cv2.WINDOW_AUTOSIZE)

    # Phosphor glow buffer
    glow = np.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=np.float32) if persistence else None
    decay = 0.8

    frame_delay = 1.0 / fps if display else 0
    paused = False

    try:
        for i, frame_display in enumerate(displays):
            start_time = time.time()

            if persistence:
                glow = np.clip(glow * decay + frame_display.astype(np.float32), 0.0, 1.0)
                pixel_values = glow.T
            else:
                pixel_values = frame_display.T.astype(np.float32)

            frame = np.zeros((SCREEN_HEIGHT, SCREEN_WIDTH, 3), dtype=np.uint8)
            for c in range(3):
                frame[:, :, c] = off_color[c] + pixel_values * (on_color[c] - off_color[c])

            if scale > 1:
                frame = np.repeat(np.repeat(frame, scale, axis=0), scale, axis=1)
            frame_bgr = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)

            if writer:
                writer.write(frame_bgr)

            if display:
                cv2.imshow(window_name, frame_bgr)

                key = cv2.waitKey(1) & 0xFF
                if key == ord('q') or key == 27:
                    break
                elif key == ord(' '):
                    paused = not paused

                while paused:
                    key = cv2.waitKey(30) & 0xFF
                    if key == ord(' '):
                        paused = False
                    elif key == ord('q') or key == 27:
                        return

                sleep_time = max(0, frame_delay - (time.time() - start_time))
                if sleep_time > 0:
                    time.sleep(sleep_time)

    finally:
        if writer:
            writer.release()
        if display:
            cv2.destroyAllWindows()
