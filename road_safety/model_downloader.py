"""
Model downloader for the road safety system.
Downloads the YOLO detection weights if they don't exist locally.
"""

import os
import logging
import shutil

import requests
from tqdm import tqdm
from ultralytics import YOLO

from road_safety import config

logger = logging.getLogger(__name__)

# Direct download URLs for weights we know about
MODEL_URLS = {
    os.path.basename(config.DETECTION_MODEL): config.DETECTION_MODEL_URL,
}

STANDARD_YOLO_MODELS = ("yolov8n.pt", "yolov8s.pt", "yolov8m.pt", "yolov8l.pt", "yolov8x.pt")

def download_file(url, destination, timeout=30):
    """
    Download a file from a URL to a destination with progress bar.

    Args:
        url: URL to download from
        destination: Path to save the file to
        timeout: Seconds to wait for the server to respond

    Returns:
        True if successful, False otherwise
    """
    partial = destination + ".part"
    try:
        response = requests.get(url, stream=True, timeout=timeout)
        response.raise_for_status()

        total_size = int(response.headers.get('content-length', 0))
        block_size = 1024  # 1 KB

        os.makedirs(os.path.dirname(destination) or ".", exist_ok=True)

        with open(partial, 'wb') as file, tqdm(
                desc=os.path.basename(destination),
                total=total_size,
                unit='iB',
                unit_scale=True,
                unit_divisor=1024,
        ) as bar:
            for data in response.iter_content(block_size):
                file.write(data)
                bar.update(len(data))

        # Only a complete download replaces the destination
        shutil.move(partial, destination)
        return True

    except Exception as e:
        logger.error(f"Error downloading file from {url}: {e}")
        if os.path.exists(partial):
            os.remove(partial)
        return False

def ensure_model_exists(model_path=None):
    """
    Ensure a model exists at the specified path, downloading it if necessary.

    Args:
        model_path: Path to the model file, defaults to config.DETECTION_MODEL

    Returns:
        True if the model exists or was downloaded successfully, False otherwise
    """
    model_path = model_path or config.DETECTION_MODEL
    if os.path.exists(model_path):
        logger.info(f"Model already exists: {model_path}")
        return True

    model_filename = os.path.basename(model_path)

    if model_filename in MODEL_URLS:
        url = MODEL_URLS[model_filename]
        logger.info(f"Downloading model from {url} to {model_path}")
        if download_file(url, model_path):
            logger.info(f"Model downloaded successfully to {model_path}")
            return True
        logger.warning(f"Failed to download model from {url}")

    # Let ultralytics fetch standard weights itself
    if model_filename in STANDARD_YOLO_MODELS:
        try:
            logger.info(f"Downloading standard YOLOv8 model through ultralytics: {model_filename}")
            model = YOLO(model_filename)
            os.makedirs(os.path.dirname(model_path) or ".", exist_ok=True)
            model.save(model_path)
            logger.info(f"Model downloaded and saved to {model_path}")
            return True
        except Exception as e:
            logger.error(f"Failed to download standard YOLOv8 model: {e}")

    logger.error(f"No download source available for model: {model_filename}")
    return False
