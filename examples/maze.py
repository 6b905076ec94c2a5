"""Run David Winter's Maze headless, print the PC trace, and save the maze."""

import superchip
from superchip.rendering import FrameRecorder, save_frame

# Maze (alt) [David Winter, 199x]
MAZE = bytes([
    0x60, 0x00, 0x61, 0x00, 0xA2, 0x22, 0xC2, 0x01,
    0x32, 0x01, 0xA2, 0x1E, 0xD0, 0x14, 0x70, 0x04,
    0x30, 0x40, 0x12, 0x04, 0x60, 0x00, 0x71, 0x04,
    0x31, 0x20, 0x12, 0x04, 0x12, 0x1C, 0x80, 0x40,
    0x20, 0x10, 0x20, 0x40, 0x80, 0x10,
])

if __name__ == "__main__":
    recorder = FrameRecorder()
    processor = superchip.init(MAZE, screen_sink=recorder, seed=0)

    for _ in range(38):
        print(f"PC: {int(processor.state.pc):3X}")
        processor.advance()

    processor.run(max_steps=20000)
    print(f"{len(recorder)} frames drawn")
    save_frame(processor.frame(), "maze.png")
