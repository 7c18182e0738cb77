"""Parser for WitMotion WT901BLE IMU notifications (0x55 0x61 frames).

Each notification carries one or more 20-byte frames:

    0x55 0x61 | AX AY AZ | WX WY WZ | ROLL PITCH YAW

with every value a little-endian int16. Acceleration spans +-16 g, angular
rate +-2000 deg/s and angles +-180 deg over the full int16 range.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Dict, List

FRAME_HEADER = 0x55
FRAME_FLAG = 0x61
FRAME_LEN = 20

ACCEL_SCALE = 16.0 / 32768.0
GYRO_SCALE = 2000.0 / 32768.0
ANGLE_SCALE = 180.0 / 32768.0

_FRAME_STRUCT = struct.Struct("<9h")


@dataclass(frozen=True)
class Wt901Frame:
    """One decoded IMU frame; acceleration in g, rates and angles in degrees."""

    ax: float
    ay: float
    az: float
    wx: float
    wy: float
    wz: float
    roll_deg: float
    pitch_deg: float
    yaw_deg: float

    @property
    def heading_deg(self) -> float:
        """Compass heading, clockwise from north in [0, 360)."""
        return (360.0 - self.yaw_deg) % 360.0

    @property
    def attitude_rad(self) -> tuple:
        return (
            math.radians(self.roll_deg),
            math.radians(self.pitch_deg),
            math.radians(self.yaw_deg),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "ax": self.ax,
            "ay": self.ay,
            "az": self.az,
            "wx": self.wx,
            "wy": self.wy,
            "wz": self.wz,
            "roll": self.roll_deg,
            "pitch": self.pitch_deg,
            "yaw": self.yaw_deg,
        }


def parse_wt901_frames(payload: bytes) -> List[Wt901Frame]:
    """Scan ``payload`` for 0x55 0x61 frames; bytes between frames are skipped."""
    frames: List[Wt901Frame] = []
    i = 0
    end = len(payload)

    while i + FRAME_LEN <= end:
        if payload[i] != FRAME_HEADER or payload[i + 1] != FRAME_FLAG:
            i += 1
            continue

        ax, ay, az, wx, wy, wz, roll, pitch, yaw = _FRAME_STRUCT.unpack_from(payload, i + 2)
        frames.append(Wt901Frame(
            ax=ax * ACCEL_SCALE,
            ay=ay * ACCEL_SCALE,
            az=az * ACCEL_SCALE,
            wx=wx * GYRO_SCALE,
            wy=wy * GYRO_SCALE,
            wz=wz * GYRO_SCALE,
            roll_deg=roll * ANGLE_SCALE,
            pitch_deg=pitch * ANGLE_SCALE,
            yaw_deg=yaw * ANGLE_SCALE,
        ))
        i += FRAME_LEN

    return frames
