import asyncio
import logging
import os
import sys
from datetime import datetime

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from exceptions import InvalidURL, ScrapeError
from seo_analyzer import analyze_url

# Load environment variables
load_dotenv()

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger('seo_audit')

# Initialize Flask app
app = Flask(__name__)
CORS(app)  # Enable CORS for frontend integration

# Set up rate limiting with key_func as first parameter
limiter = Limiter(
    key_func=get_remote_address,
    app=app,
    default_limits=["200 per day", "50 per hour"],
    storage_uri="memory://"  # Use memory for rate limiting
)


def run_audit(url: str):
    """Run one audit to completion, logging its progress checkpoints"""
    def log_progress(percent: int) -> None:
        app.logger.info(f"Audit of {url}: {percent}%")

    return asyncio.run(analyze_url(url, on_progress=log_progress))


@app.route('/health')
def health():
    return jsonify({"status": "healthy", "timestamp": datetime.now().isoformat()})


@app.route('/api/audit', methods=['POST'])
@limiter.limit("10 per hour")
def audit():
    payload = request.get_json(silent=True) or {}
    url = payload.get('url') or request.form.get('url')
    if not url or not isinstance(url, str):
        return jsonify({"status": "error", "error": "A 'url' field is required"}), 400

    try:
        result = run_audit(url)
    except InvalidURL as e:
        logger.info(f"Rejected audit request: {e}")
        return jsonify({"status": "error", "error": str(e)}), 400
    except ScrapeError as e:
        logger.error(f"Audit of {url} failed: {e}")
        return jsonify({
            "status": "failed",
            "error": "Failed to analyze website. Please check the URL and try again.",
            "detail": str(e),
        }), 502

    return jsonify({"status": "completed", "result": result.to_dict()})


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=os.environ.get('FLASK_DEBUG', 'false').lower() == 'true')
