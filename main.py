import argparse
import logging

from clothsim.clothenv import ClothEnv
from clothsim.config.base_config import Config, load_config
from clothsim.logging_config import setup_logging


def parse_args():
    parser = argparse.ArgumentParser(description='Mass-spring cloth draped over a sphere')
    parser.add_argument('--config', type=str, default=None,
                        help='YAML file overriding the default Config')
    parser.add_argument('--frames', type=int, default=1000,
                        help='Number of rendered frames')
    parser.add_argument('--substeps', type=int, default=None,
                        help='Velocity/position steps per frame (default: config n_substeps)')
    parser.add_argument('--no-render', action='store_true',
                        help='Run the simulation without a viewer')
    parser.add_argument('--record', type=str, default=None,
                        help='Record frames offscreen to this file (.gif or .mp4)')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    setup_logging(getattr(logging, args.log_level))
    logger = logging.getLogger("clothsim.main")

    cfg = load_config(args.config) if args.config else Config()
    if args.no_render:
        cfg.render_model = "none"
    if args.record:
        cfg.record_path = args.record

    env = ClothEnv(cfg)

    try:
        for frame in range(args.frames):
            env.step(n_substeps=args.substeps)
            env.render()
            if frame % 100 == 0:
                logger.info("Frame %d, t=%.3fs", frame, env.time)
    except KeyboardInterrupt:
        logger.info("Simulation stopped by user")
    finally:
        env.close()
