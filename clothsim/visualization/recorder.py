import logging
import os

import imageio.v3 as iio
import numpy as np

logger = logging.getLogger(__name__)


class Recorder:
    def __init__(self, output_file='cloth.gif', fps=30):
        self.output_file = output_file
        self.fps = fps
        self.frames = []

    def __len__(self):
        return len(self.frames)

    def add_frame(self, frame):
        """
        Add a frame to the recorder.
        frame should be an (H, W, 3) or (H, W, 4) array, e.g. from an offscreen render.
        """
        self.frames.append(np.asarray(frame, dtype=np.uint8))

    def save(self):
        """Write the accumulated frames to the video file."""
        if not self.frames:
            logger.warning("No frames recorded, %s not written", self.output_file)
            return

        stack = np.stack(self.frames)
        if os.path.splitext(self.output_file)[1].lower() == ".gif":
            # pillow takes the per-frame duration in milliseconds
            iio.imwrite(self.output_file, stack, duration=1000.0 / self.fps, loop=0)
        else:
            iio.imwrite(self.output_file, stack, fps=self.fps)
        logger.info("Wrote %d frames to %s", len(self.frames), self.output_file)
