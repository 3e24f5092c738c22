"""ScholarScope Web Application
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Flask JSON API over the aggregation layer.

Endpoints:
- ``POST /api/search``: ranked researcher search
- ``GET /api/researcher/<orcid_id>``: aggregated researcher profile
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import BadRequest

from .aggregate import ResearcherService, build_service
from .errors import AuthError, NotFound, UpstreamError

logger = logging.getLogger(__name__)

RETRY_HINT = "Please try again in a few moments."


def _upstream_error(error: UpstreamError, label: str):
    return jsonify({
        'error': f'{label} failed',
        'message': f'{error}. {RETRY_HINT}',
    }), 502


def _config_error(error: AuthError):
    return jsonify({
        'error': 'Server configuration incomplete',
        'message': str(error),
    }), 500


def create_app(service: Optional[ResearcherService] = None) -> Flask:
    """
    Build the Flask application.

    Parameters
    ----------
    service : ResearcherService, optional
        The aggregation service; built from the environment when omitted.
    """
    app = Flask(__name__)
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'scholarscope-dev-key-change-in-production')
    app.extensions['scholarscope'] = service or build_service()

    def _service() -> ResearcherService:
        return app.extensions['scholarscope']

    @app.route('/api/search', methods=['POST'])
    def api_search():
        """
        Search researchers.

        Expected JSON payload:
        {
            "query": "Maria Silva",
            "type": "name" | "keywords",
            "country": "BR" | "all" (optional)
        }
        """
        try:
            data = request.get_json(silent=True)
            if not data or not isinstance(data, dict):
                raise BadRequest('No JSON data provided')
            query = str(data.get('query') or '').strip()
            search_type = str(data.get('type') or 'name').strip()
            country = data.get('country') or None
            researchers = _service().search(query, search_type, country)
        except BadRequest as e:
            return jsonify({'error': e.description}), 400
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        except AuthError as e:
            logger.error(f"Search rejected, registry credentials: {e}")
            return _config_error(e)
        except UpstreamError as e:
            logger.error(f"Search error: {e}")
            return _upstream_error(e, 'Search')

        return jsonify({'researchers': [r.to_dict() for r in researchers]})

    @app.route('/api/researcher/<orcid_id>')
    def api_researcher(orcid_id):
        """Aggregated profile for one ORCID iD."""
        try:
            profile = _service().get_profile(orcid_id)
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        except NotFound:
            return jsonify({'error': 'Researcher not found'}), 404
        except AuthError as e:
            logger.error(f"Profile rejected, registry credentials: {e}")
            return _config_error(e)
        except UpstreamError as e:
            logger.error(f"Profile error for {orcid_id}: {e}")
            return _upstream_error(e, 'Profile request')

        return jsonify(profile.to_dict())

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        return jsonify({'error': 'Internal server error'}), 500

    return app
