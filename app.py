from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
import os
import time
from datetime import datetime

import psutil

from alternatives import normalize_category, rank_alternatives
from ingredient_database import ALERT_FLAGS, get_reference_database
from ingredient_scanner import lookup_ingredient, score_product
from scanner_config import CONCERN_LEVELS, MATCH_MODE, PRODUCT_CATEGORIES
from scanner_errors import InvalidInputError

app = Flask(__name__)

# Ingredient lists are small JSON bodies
app.config["MAX_CONTENT_LENGTH"] = 1 * 1024 * 1024
app.json.sort_keys = False

SLOW_REQUEST_SECONDS = float(os.getenv('SLOW_REQUEST_SECONDS', '2'))
HIGH_MEMORY_MB = int(os.getenv('HIGH_MEMORY_MB', '300'))
CRITICAL_MEMORY_MB = int(os.getenv('CRITICAL_MEMORY_MB', '400'))

database = get_reference_database()
print(f"INFO: Reference database v{database.version} loaded - {len(database)} ingredients, match mode '{MATCH_MODE}'")


@app.before_request
def before_request_timing():
    """Track request start time"""
    request.start_time = time.time()


@app.after_request
def after_request_logging(response):
    """Log slow requests and keep error responses out of caches"""
    if hasattr(request, 'start_time'):
        processing_time = time.time() - request.start_time
        if processing_time > SLOW_REQUEST_SECONDS:
            print(f"WARNING: Slow request took {processing_time:.2f}s for {request.endpoint}")

    if response.status_code >= 500:
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'

    return response


def get_json_body():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidInputError("request body must be a JSON object")
    return payload


def optional_text(payload, key):
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise InvalidInputError(f"'{key}' must be a string")
    return value


@app.route('/analyze', methods=['POST'])
def analyze():
    """Score one extracted ingredient list"""
    payload = get_json_body()

    ingredients = payload.get('ingredients')
    if not isinstance(ingredients, list):
        raise InvalidInputError("'ingredients' must be a list of ingredient names")

    category = normalize_category(
        optional_text(payload, 'category'),
        optional_text(payload, 'product_type'),
    )

    result = score_product(
        product_name=optional_text(payload, 'product_name'),
        brand=optional_text(payload, 'brand'),
        raw_ingredients=ingredients,
        raw_text=optional_text(payload, 'raw_text'),
        category=category,
    )

    print(f"INFO: Scored '{result.product_name}' ({len(result.ingredients)} ingredients): "
          f"{result.overall_score} [{result.rating}]")

    response = result.to_dict()
    response['scanned_at'] = datetime.now().isoformat()
    return jsonify(response)


@app.route('/ingredients')
def list_ingredients():
    """All reference ingredients, optionally filtered by ?concern= or ?alert="""
    concern = request.args.get('concern')
    alert = request.args.get('alert')

    if concern:
        if concern not in CONCERN_LEVELS:
            raise InvalidInputError(f"concern must be one of {', '.join(CONCERN_LEVELS)}")
        records = database.by_concern(concern)
    elif alert:
        if alert not in ALERT_FLAGS:
            raise InvalidInputError(f"alert must be one of {', '.join(ALERT_FLAGS)}")
        records = database.with_alert(alert)
    else:
        records = list(database)

    return jsonify({
        'version': database.version,
        'count': len(records),
        'ingredients': [record.to_dict() for record in records],
    })


@app.route('/ingredients/search')
def search_ingredients():
    query = request.args.get('q', '').strip()
    if not query:
        raise InvalidInputError("query parameter 'q' is required")

    hits = database.search(query)
    return jsonify({'query': query, 'count': len(hits), 'results': [hit.to_dict() for hit in hits]})


@app.route('/ingredients/lookup')
def lookup():
    name = request.args.get('name', '').strip()
    if not name:
        raise InvalidInputError("query parameter 'name' is required")

    return jsonify(lookup_ingredient(name).to_dict())


@app.route('/ingredients/<ingredient_id>')
def ingredient_detail(ingredient_id):
    record = database.get(ingredient_id)
    if record is None:
        return jsonify({'error': f"Unknown ingredient '{ingredient_id}'"}), 404
    return jsonify(record.to_dict())


@app.route('/alternatives')
def alternatives():
    """Healthier alternatives in the same product category"""
    raw_score = request.args.get('score')
    try:
        original_score = float(raw_score)
    except (TypeError, ValueError):
        raise InvalidInputError("query parameter 'score' must be a number")
    if original_score.is_integer():
        original_score = int(original_score)

    ranking = rank_alternatives(
        request.args.get('category'),
        original_score,
        view=request.args.get('view', 'all'),
    )
    return jsonify(ranking.to_dict())


@app.route('/categories')
def categories():
    return jsonify({'categories': PRODUCT_CATEGORIES})


@app.route('/health')
def health_check():
    """Health check endpoint for load balancer and monitoring"""
    start_time = time.time()

    memory_mb = psutil.Process().memory_info().rss / 1024 / 1024
    response_time = (time.time() - start_time) * 1000

    status = 'healthy'
    http_code = 200

    if memory_mb > CRITICAL_MEMORY_MB:
        status = 'critical_memory'
        http_code = 503
    elif memory_mb > HIGH_MEMORY_MB:
        status = 'high_memory'

    return jsonify({
        'status': status,
        'memory_mb': round(memory_mb, 1),
        'response_time_ms': round(response_time, 1),
        'timestamp': datetime.now().isoformat(),
        'database_version': database.version,
        'ingredient_count': len(database),
        'match_mode': MATCH_MODE,
    }), http_code


# Error handlers
@app.errorhandler(InvalidInputError)
def invalid_input(e):
    return jsonify({'error': 'Invalid input', 'message': str(e)}), 400


@app.errorhandler(HTTPException)
def http_error(e):
    return jsonify({'error': e.name, 'message': e.description}), e.code


@app.errorhandler(Exception)
def internal_error(e):
    print(f"ERROR: Unhandled {type(e).__name__} on {request.path}: {e}")
    return jsonify({'error': 'Internal Server Error', 'message': 'Something went wrong while scoring.'}), 500


# Use Gunicorn for production
if __name__ == '__main__':
    # Only for local development - production uses Gunicorn
    port = int(os.environ.get("PORT", 5000))
    print("WARNING: Running with Flask development server. Use Gunicorn for production!")
    app.run(host="0.0.0.0", port=port, debug=False)
