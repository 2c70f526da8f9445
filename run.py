#!/usr/bin/env python3
"""
Smart Road Safety System - Main entry point
"""

import sys
import argparse

from road_safety import config
from road_safety.main import main, setup_logging
from road_safety.model_downloader import ensure_model_exists
from road_safety.risk_assessment.alert_state import TripParameters

def build_parser():
    parser = argparse.ArgumentParser(description="Smart Road Safety System")
    parser.add_argument("--source", default=str(config.WEBCAM_ID),
                        help="Webcam ID or path to an image/video file")
    parser.add_argument("--mode", choices=sorted(config.FILTER_MODES), default=config.DEFAULT_FILTER_MODE,
                        help="Detection filter mode")
    parser.add_argument("--target-speed", type=float, default=config.DEFAULT_TARGET_SPEED,
                        help="Speed cap in km/h")
    parser.add_argument("--distance", type=float, default=config.DEFAULT_OBSTACLE_DISTANCE,
                        help="Distance to obstacle in meters")
    parser.add_argument("--mute", action="store_true", help="Start with voice alerts off")
    parser.add_argument("--no-display", action="store_true", help="Log alerts instead of opening a window")
    parser.add_argument("--setup-only", action="store_true", help="Only download models, don't run the application")
    parser.add_argument("--download-models", action="store_true", help="Download the detection model and exit")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level")
    return parser

if __name__ == "__main__":
    args = build_parser().parse_args()
    setup_logging(args.log_level.upper())

    print("Checking for required models...")
    if not ensure_model_exists(config.DETECTION_MODEL):
        print("Detection model is not available; the system will run without alerts")

    if args.download_models or args.setup_only:
        print("Setup completed. Use 'python run.py' to start the application.")
        sys.exit(0)

    # User inputs are clamped here, the control loop does not validate them
    trip = TripParameters(
        target_speed=config.clamp_trip_value(args.target_speed, config.TARGET_SPEED_RANGE),
        obstacle_distance=config.clamp_trip_value(args.distance, config.OBSTACLE_DISTANCE_RANGE),
        sound_enabled=not args.mute
    )

    print("Starting Smart Road Safety System...")
    main(source=args.source, mode=args.mode, trip=trip, display=not args.no_display)
