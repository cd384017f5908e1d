"""
CHIP-8 emulator driver: pygame window, keyboard input and wall-clock timers.

    python main.py rom=roms/brix.ch8
    python main.py rom=roms/brix.ch8 headless=true frames=1200 video=brix.mp4
"""

import time

import hydra
import numpy as np
import pygame
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf
from tqdm import tqdm

from chix8 import Engine, Status, MachineFault
from chix8.logging import ConsoleLogger, log_config
from chix8.rendering import chip8_display_to_rgb, create_color_scheme, create_video

#    Key Mappings
# Chip8       QWERTY
# 1 2 3 C     1 2 3 4
# 4 5 6 D >>> Q W E R
# 7 8 9 E >>> A S D F
# A 0 B F     Z X C V
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def poll_key():
    """First mapped key currently held, or None. The machine sees one key at a time."""
    pressed = pygame.key.get_pressed()
    for key, code in KEY_MAP.items():
        if pressed[key]:
            return code
    return None


def run_window(engine: Engine, cfg: DictConfig, logger: ConsoleLogger):
    """Interactive loop: one frame per tick of the pygame clock."""
    pygame.init()
    screen = pygame.display.set_mode((64 * cfg.scale, 32 * cfg.scale))
    pygame.display.set_caption("CHIP-8")
    clock = pygame.time.Clock()

    last_time = time.perf_counter()
    was_beeping = False
    running = True

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_BACKSPACE:
                engine.reset()
                logger.info("Reset")

        engine.set_input(poll_key())

        for _ in range(cfg.instructions_per_frame):
            try:
                status = engine.step()
            except MachineFault:
                logger.info("Backspace resets, Escape quits")
                break
            if status != Status.RUNNING:
                break

        now = time.perf_counter()
        engine.tick_timers(now - last_time)
        last_time = now

        frame, changed = engine.export_frame()
        beeping = engine.sound_active()
        if changed or beeping != was_beeping:
            on_color, off_color = create_color_scheme(cfg.color_scheme, sound_active=beeping)
            rgb = chip8_display_to_rgb(frame, cfg.scale, on_color, off_color)
            # surfarray expects (width, height, 3)
            screen.blit(pygame.surfarray.make_surface(rgb.swapaxes(0, 1)), (0, 0))
            pygame.display.flip()
        was_beeping = beeping

        clock.tick(cfg.fps)

    pygame.quit()


def run_headless(engine: Engine, cfg: DictConfig, logger: ConsoleLogger):
    """Run a fixed number of frames with no input, optionally recording them."""
    frames = []
    sounds = []

    for _ in tqdm(range(cfg.frames), desc="Emulating", unit="frame"):
        try:
            status = engine.run(cfg.instructions_per_frame)
        except MachineFault:
            break
        engine.tick_timers(1.0 / cfg.fps)
        frame, _ = engine.export_frame()
        frames.append(frame)
        sounds.append(engine.sound_active())
        if status == Status.WAITING_FOR_KEY:
            logger.warning("Program is waiting for a key; no input in headless mode")
            break

    logger.info(f"Ran {len(frames)} frames, pc=0x{int(engine.state.pc):03X}")

    if cfg.video and frames:
        filename = to_absolute_path(cfg.video)
        create_video(np.stack(frames), filename=filename, fps=cfg.fps, scale=cfg.scale,
                     color_scheme=cfg.color_scheme, sound=sounds)
        logger.info(f"Video saved: {filename} ({len(frames)} frames, {cfg.fps} FPS)")


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    logger = ConsoleLogger(name="chix8", log_level=cfg.log_level)
    log_config(logger, OmegaConf.to_container(cfg))

    engine = Engine(seed=cfg.seed, strict=cfg.strict, logger=logger)
    engine.load_rom(to_absolute_path(cfg.rom))

    if cfg.headless:
        run_headless(engine, cfg, logger)
    else:
        run_window(engine, cfg, logger)


if __name__ == "__main__":
    main()
