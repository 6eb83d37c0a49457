import logging
import os

import cv2
import numpy as np
from flask import Flask, request, jsonify
from flask_cors import CORS

# load envs
from dotenv import load_dotenv
load_dotenv()

from id_detection.params import CONFIG_KEYS, load_overrides_from_env
from id_reader import IdReader, ErrorCode


PORT = int(os.getenv("PORT", 5000))
HOST = os.getenv("HOST", None)

# ID_READER_* settings, read once after .env was loaded above
ENV_OVERRIDES = load_overrides_from_env(environ=os.environ)

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes
CORS(app)

# Set the maximum file size to 50MB
MEGABYTE = (2 ** 10) ** 2
app.config['MAX_CONTENT_LENGTH'] = 50 * MEGABYTE


def build_reader() -> IdReader:
    """
    Reader for one request: environment config, then query-string overrides.

    Raises:
        RuntimeError: If the environment config holds an invalid value
        ValueError: If a query-string override is invalid
    """
    reader = IdReader()
    for key, value in ENV_OVERRIDES.items():
        if reader.set_config(key, value) != ErrorCode.SUCCESS:
            raise RuntimeError(f"Invalid environment config {key}={value!r}")
    for key, value in request.args.items():
        if key in CONFIG_KEYS or key == 'scoring_profile':
            code = reader.set_config(key, value)
            if code != ErrorCode.SUCCESS:
                raise ValueError(f"Invalid value for {key}: {value}")
    return reader


@app.route('/is-available', methods=['GET'])
def is_available():
    return jsonify(isAvailable=True), 200


@app.route('/detect', methods=['POST'])
def detect():
    file = request.files.get('file')
    if file is None:
        return jsonify(message="No file uploaded"), 400

    raw = np.frombuffer(file.read(), dtype=np.uint8)
    image = cv2.imdecode(raw, cv2.IMREAD_COLOR) if raw.size else None
    if image is None:
        return jsonify(message="Could not decode image"), 400

    try:
        reader = build_reader()
    except ValueError as e:
        return jsonify(message=str(e)), 400
    except RuntimeError as e:
        logger.error("%s", e)
        return jsonify(message="Invalid server configuration"), 500

    result = reader.process_array(image)

    if result.error == ErrorCode.NO_DOCUMENT_FOUND:
        return jsonify(message=result.error.description), 404
    if result.error == ErrorCode.INVALID_INPUT:
        return jsonify(message=result.error.description), 400
    if not result.ok:
        logger.warning("Detection failed for %s: %s", file.filename, result.error.description)
        return jsonify(message=result.error.description), 500

    return jsonify(result.to_dict()), 200


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True, port=PORT, host=HOST)
