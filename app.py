"""
Flask Application for the IoT Botnet Detection Simulator
========================================================
Serves the upload -> results -> device details flow as a JSON API.

Nothing uploaded is ever parsed: the file name alone seeds the generated
summary and device roster, so the same name always gives the same results.

Features:
- Simulated processing delay on analysis submit
- Results summary, device roster with search and tabs, signed CSV export
- Security headers and per-client rate limiting
- Optional HTTPS for the development server
"""

import os
import re
import ssl
import time
from collections import defaultdict
from datetime import datetime, timezone
from functools import wraps
from io import BytesIO
from pathlib import Path

from flask import Flask, current_app, jsonify, request, send_file

from detection.config import AppConfig, get_app_config
from detection.models import AnalysisConfig, AnalysisSession, UploadedFile
from detection.report import ReportSigner, export_report
from detection.roster import filter_roster, generate_roster, partition_roster
from detection.summary import generate_summary

# Roster shown when the device view is opened without a summary
FALLBACK_TOTAL_DEVICES = 287
FALLBACK_BLOCKED_DEVICES = 14

# Largest device count the devices endpoint will expand into a roster
MAX_DEVICE_COUNT = 100_000

CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')

DEVICE_TABS = ("all", "blocked", "clean")

INDEX_HTML = '''
<h1>🛡️ IoT Botnet Detection Analysis</h1>
<ol>
  <li>Upload your preprocessed IoT traffic data file (CSV, JSON, PCAP)</li>
  <li>Adjust detection parameters if needed</li>
  <li>POST to /api/analysis to begin detection</li>
</ol>
'''


class BadRequest(Exception):
    """A request parameter could not be used."""


# ====================
# Rate Limiting
# ====================

def rate_limit(func):
    """Decorator to apply rate limiting to endpoints."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        config = current_app.config['APP_CONFIG']
        if not config.rate_limit_enabled:
            return func(*args, **kwargs)

        storage = current_app.extensions['rate_limit_storage']
        client_ip = request.remote_addr
        current_time = time.time()
        window_start = current_time - config.rate_limit_window_seconds

        # Clean old entries, dropping clients with nothing left in the window
        for ip in [ip for ip, times in storage.items() if not times or times[-1] <= window_start]:
            del storage[ip]
        storage[client_ip] = [t for t in storage[client_ip] if t > window_start]

        if len(storage[client_ip]) >= config.rate_limit_requests:
            return jsonify({
                'error': 'Rate limit exceeded',
                'retry_after': config.rate_limit_window_seconds
            }), 429

        storage[client_ip].append(current_time)
        return func(*args, **kwargs)
    return wrapper


# ====================
# Request Parsing
# ====================

def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise BadRequest(f"'{name}' must be an integer")


def _count_arg(name: str, default: int) -> int:
    value = _int_arg(name, default)
    if value > MAX_DEVICE_COUNT:
        raise BadRequest(f"'{name}' must not exceed {MAX_DEVICE_COUNT}")
    return value


def _file_name_arg(config: AppConfig) -> str:
    return request.args.get('fileName', config.default_file_name)


def _report_download_name(file_name: str) -> str:
    """Attachment name for an exported report; control characters and lone surrogates replaced."""
    stem = CONTROL_CHARS.sub('_', Path(file_name).stem) or 'analysis'
    stem = stem.encode('utf-8', errors='replace').decode('utf-8')
    return f"{stem}_report.csv"


def _session_from_request() -> AnalysisSession:
    """Read the uploaded file and detection config from a multipart or JSON request."""
    upload = request.files.get('file')
    if upload is not None and upload.filename:
        upload.stream.seek(0, os.SEEK_END)
        uploaded = UploadedFile(name=upload.filename, size=upload.stream.tell(), type=upload.mimetype or '')
        config_data = {key: request.form[key] for key in ('model', 'confidence', 'batchSize') if key in request.form}
    else:
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict) or 'fileName' not in data:
            raise BadRequest('No file uploaded')
        try:
            uploaded = UploadedFile(
                name=str(data['fileName']),
                size=int(data.get('size', 0)),
                type=str(data.get('type', '')),
            )
        except (TypeError, ValueError):
            raise BadRequest("'size' must be an integer")
        config_data = data.get('config')

    try:
        analysis_config = AnalysisConfig.from_dict(config_data)
    except ValueError as e:
        raise BadRequest(str(e))

    issues = analysis_config.validate()
    if issues:
        raise BadRequest('; '.join(issues))

    return AnalysisSession(uploaded_file=uploaded, config=analysis_config)


# ====================
# Application Factory
# ====================

def create_app(config: AppConfig = None) -> Flask:
    """
    Create the Flask application.

    Args:
        config: Application configuration

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)
    config = config or get_app_config()

    app.config['APP_CONFIG'] = config
    app.extensions['rate_limit_storage'] = defaultdict(list)
    app.extensions['report_signer'] = ReportSigner(config.report_signing_key)

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        if config.secure_headers_enabled:
            response.headers['X-Frame-Options'] = 'DENY'
            response.headers['X-Content-Type-Options'] = 'nosniff'
            response.headers['Content-Security-Policy'] = (
                "default-src 'self'; "
                "style-src 'self' 'unsafe-inline'; "
                "img-src 'self' data:"
            )
            if config.ssl_enabled:
                response.headers['Strict-Transport-Security'] = (
                    f'max-age={config.hsts_max_age}; includeSubDomains'
                )
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response

    @app.errorhandler(BadRequest)
    def handle_bad_request(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Page not found', 'path': request.path}), 404

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({'error': 'Internal server error'}), 500

    @app.route('/')
    def home():
        return INDEX_HTML

    @app.route('/api/analysis', methods=['POST'])
    @rate_limit
    def start_analysis():
        """Accept an upload, simulate processing, return the results summary."""
        session = _session_from_request()

        # Simulated processing time
        time.sleep(max(0.0, config.processing_delay_seconds))

        summary = generate_summary(session.file_name)
        return jsonify({
            'fileName': session.file_name,
            'file': session.uploaded_file.to_dict(),
            'config': session.config.to_dict(),
            'summary': summary.to_dict(),
        })

    @app.route('/api/results')
    @rate_limit
    def results():
        """Summary numbers and chart data for a file name."""
        return jsonify(generate_summary(_file_name_arg(config)).to_dict())

    @app.route('/api/results/export')
    @rate_limit
    def export_results():
        """Signed CSV report of the summary and device roster."""
        file_name = _file_name_arg(config)
        summary = generate_summary(file_name)
        roster = generate_roster(file_name, summary.total_devices, summary.blocked_devices)
        body = export_report(summary, roster)

        response = send_file(
            BytesIO(body),
            mimetype='text/csv',
            as_attachment=True,
            download_name=_report_download_name(file_name),
        )
        response.headers['X-Report-Signature'] = app.extensions['report_signer'].sign(body)
        return response

    @app.route('/api/devices')
    @rate_limit
    def devices():
        """Device roster for a file name and summary counts, with search and tab filter."""
        file_name = _file_name_arg(config)
        total_devices = _count_arg('totalDevices', FALLBACK_TOTAL_DEVICES)
        blocked_devices = _count_arg('blockedDevices', FALLBACK_BLOCKED_DEVICES)
        tab = request.args.get('tab', 'all')
        if tab not in DEVICE_TABS:
            raise BadRequest(f"'tab' must be one of {', '.join(DEVICE_TABS)}")

        roster = generate_roster(file_name, total_devices, blocked_devices)
        blocked, clean = partition_roster(roster)
        shown = {'all': roster, 'blocked': blocked, 'clean': clean}[tab]
        matches = filter_roster(shown, request.args.get('q', ''))

        return jsonify({
            'fileName': file_name,
            'totalDevices': total_devices,
            'tab': tab,
            'counts': {'all': len(roster), 'blocked': len(blocked), 'clean': len(clean)},
            'showing': len(matches),
            'devices': [device.to_dict() for device in matches],
        })

    @app.route('/api/health')
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'ssl_enabled': config.ssl_enabled,
            'processing_delay_seconds': config.processing_delay_seconds,
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    return app


# ====================
# SSL/TLS Configuration
# ====================

def create_ssl_context(config: AppConfig) -> ssl.SSLContext:
    """
    Create SSL context for HTTPS.

    Args:
        config: Application configuration

    Returns:
        Configured SSL context
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)

    if config.min_tls_version == "TLSv1.3":
        context.minimum_version = ssl.TLSVersion.TLSv1_3
    else:
        context.minimum_version = ssl.TLSVersion.TLSv1_2

    if not config.ssl_files_present():
        raise FileNotFoundError(
            f"SSL certificate or key not found at {config.ssl_cert_path} and {config.ssl_key_path}"
        )
    context.load_cert_chain(config.ssl_cert_path, config.ssl_key_path)
    return context


def run_server(config: AppConfig = None):
    """
    Run the Flask server with optional SSL.

    Args:
        config: Application configuration (environment if None)
    """
    config = config or get_app_config()
    app = create_app(config)

    print("\n" + "=" * 60)
    print("🚀 STARTING IoT BOTNET DETECTION SIMULATOR")
    print("=" * 60)
    for issue in config.validate():
        print(f"⚠️  {issue}")

    scheme = 'http'
    ssl_context = None
    if config.ssl_enabled:
        try:
            ssl_context = create_ssl_context(config)
            scheme = 'https'
            print(f"🔒 HTTPS ENABLED - TLS {config.min_tls_version}+")
        except FileNotFoundError as e:
            print(f"⚠️  {e}")
            print("Starting in HTTP mode (development only)...")

    print(f"⏳ Simulated processing delay: {config.processing_delay_seconds:g}s")
    print(f"📱 OPEN IN BROWSER: {scheme}://{config.host}:{config.port}")
    print("=" * 60 + "\n")
    app.run(host=config.host, port=config.port, ssl_context=ssl_context, debug=False)


if __name__ == '__main__':
    run_server()
