"""
SUPER-CHIP interpreter driver: a pygame window, or a headless run with
screenshot/video output.

    python main.py rom=games/ant.ch8 super_mode=true
    python main.py rom=maze.ch8 headless=true max_steps=5000 video=maze.mp4
"""

import hydra
import numpy as np
from hydra.utils import to_absolute_path
from omegaconf import DictConfig

from superchip import Processor, StepResult, Chip8Fault, SCREEN_WIDTH, SCREEN_HEIGHT
from superchip.logging import ConsoleLogger, format_registers
from superchip.rendering import (
    FrameRecorder, create_color_scheme, create_video, display_to_rgb, save_frame,
)

# Modern key mapping: 1234/QWER/ASDF/ZXCV -> 123C/456D/789E/A0BF
KEY_LAYOUT = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


def run_headless(cfg: DictConfig, logger: ConsoleLogger) -> None:
    recorder = FrameRecorder()
    processor = Processor.from_rom(
        to_absolute_path(cfg.rom),
        screen_sink=recorder,
        super_mode=cfg.super_mode,
        seed=cfg.seed,
        logger=logger,
    )
    try:
        result = processor.run(max_steps=cfg.max_steps, instructions_per_tick=cfg.ipf, progress=True)
    except Chip8Fault as e:
        logger.error(f"Stopped: {e}")
        return
    logger.info(f"Finished with {result.name} after {processor.steps} steps | {format_registers(processor.state)}")

    if cfg.screenshot:
        save_frame(processor.frame(), to_absolute_path(cfg.screenshot), color_scheme=cfg.color_scheme)
        logger.info(f"Saved frame to {cfg.screenshot}")
    if cfg.video and len(recorder):
        create_video(recorder.frames, filename=to_absolute_path(cfg.video), color_scheme=cfg.color_scheme)
        logger.info(f"Saved {len(recorder)} frames to {cfg.video}")


def run_window(cfg: DictConfig, logger: ConsoleLogger) -> None:
    import pygame

    pygame.init()
    scale = cfg.scale
    screen = pygame.display.set_mode((SCREEN_WIDTH * scale, SCREEN_HEIGHT * scale))
    pygame.display.set_caption("SUPER-CHIP")
    clock = pygame.time.Clock()
    on_color, off_color = create_color_scheme(cfg.color_scheme)

    key_map = {pygame.key.key_code(name): code for name, code in KEY_LAYOUT.items()}
    pressed = set()
    latest = {"frame": np.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=np.bool_), "beep": False}

    def screen_sink(frame):
        latest["frame"] = frame

    def sound_sink(is_playing, state):
        latest["beep"] = is_playing

    processor = Processor.from_rom(
        to_absolute_path(cfg.rom),
        screen_sink=screen_sink,
        sound_sink=sound_sink,
        key_pressed=lambda code: code in pressed,
        super_mode=cfg.super_mode,
        seed=cfg.seed,
        logger=logger,
    )

    print("🎮 Controls: ESC=Quit, P=Pause, keypad on 1-4 / Q-R / A-F / Z-V")

    running = True
    paused = False
    while running:
        clock.tick(60)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key in key_map:
                    pressed.add(key_map[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in key_map:
                    pressed.discard(key_map[event.key])

        if not paused and not processor.halted:
            processor.tick()
            for _ in range(cfg.ipf):
                try:
                    result = processor.advance()
                except Chip8Fault as e:
                    logger.error(f"💥 {e}")
                    paused = True
                    break
                if result != StepResult.RUNNING:
                    break

        rgb = display_to_rgb(latest["frame"], scale, on_color, off_color)
        pygame.surfarray.blit_array(screen, rgb.transpose(1, 0, 2))
        caption = "SUPER-CHIP"
        if latest["beep"]:
            caption += " ♪"
        if paused:
            caption += " (paused)"
        pygame.display.set_caption(caption)
        pygame.display.flip()

    pygame.quit()


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    logger = ConsoleLogger(log_level=cfg.log_level)
    if cfg.headless:
        run_headless(cfg, logger)
    else:
        run_window(cfg, logger)


if __name__ == "__main__":
    main()
