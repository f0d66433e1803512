# ==============================================================================
# API HTTP (Flask)
# ==============================================================================
# Las rutas solo traducen HTTP ↔ servicios. La lógica vive en services/.
# Todas las respuestas son JSON con el sobre {'ok': bool, ...}.
#
# Público:   menú, horarios, cotización, validar calle, crear pedido online,
#            seguimiento de un pedido
# Personal:  requiere sesión iniciada con el PIN; las escrituras además
#            verifican el token CSRF de la sesión
# ==============================================================================

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from functools import wraps

from flask import Flask, Response, jsonify, request, session

from lanches_pos import config
from lanches_pos.app_container import get_container
from lanches_pos.logger import get_function_stats, init_profiling, log_error, log_event, log_warning, setup_logging
from lanches_pos.errors import NotFoundError, PosError, ValidationError
from lanches_pos.models.entities import OrderOrigin, PaymentStatus, PickupType, parse_enum, parse_origin
from lanches_pos.services.cashier_service import RESPONSIBLE_LABELS
from lanches_pos.services.delivery_service import is_street_eligible
from lanches_pos.services.notification_service import build_order_payload

setup_logging()

app = Flask(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN DE SESIONES
# ═══════════════════════════════════════════════════════════════════════════
# En producción POS_SECRET_KEY DEBE venir del entorno
if config.PRODUCTION_MODE and not config.SECRET_KEY_FROM_ENV:
    log_warning("POS_PRODUCTION_MODE activo sin POS_SECRET_KEY definida")

app.secret_key = config.SECRET_KEY
app.config.update(
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SECURE=False,       # True solo detrás de HTTPS
    SESSION_COOKIE_SAMESITE='Lax',
    PERMANENT_SESSION_LIFETIME=config.SESSION_LIFETIME,
    MAX_CONTENT_LENGTH=1 * 1024 * 1024,
)

init_profiling(app)

# Orígenes que un cliente sin sesión puede usar
PUBLIC_ORIGINS = (OrderOrigin.ONLINE, OrderOrigin.TABLE)


# ═══════════════════════════════════════════════════════════════════════════
# SERIALIZACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def to_json(value):
    """Convierte entidades, Decimal, Enum y datetime a tipos JSON."""
    if hasattr(value, 'to_dict'):
        return to_json(value.to_dict())
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def respond(result):
    """Resultado de servicio → respuesta JSON con el estado HTTP adecuado."""
    body = dict(result)
    code = body.pop('code', None)
    status = 200 if body.get('ok') else (code or 400)
    return jsonify(to_json(body)), status


def ok(**payload):
    payload['ok'] = True
    return jsonify(to_json(payload))


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _container():
    return get_container()


# ═══════════════════════════════════════════════════════════════════════════
# AUTENTICACIÓN Y CSRF
# ═══════════════════════════════════════════════════════════════════════════

def is_staff():
    return session.get('role') in RESPONSIBLE_LABELS


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not is_staff():
            return {"ok": False, "error": "Inicia sesión con el PIN"}, 401
        return f(*args, **kwargs)
    return wrapper


def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


def _csrf_valid():
    token = session.get('csrf_token')
    sent = (
        request.headers.get('X-CSRF-Token') or
        request.headers.get('X-CSRFToken') or
        json_body().get('csrf_token')
    )
    return bool(token) and bool(sent) and token == sent


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method in ('POST', 'PUT', 'DELETE') and not _csrf_valid():
            return {"ok": False, "error": "CSRF token inválido"}, 403
        return f(*args, **kwargs)
    return wrapper


@app.after_request
def set_security_headers(response):
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    response.headers['Permissions-Policy'] = 'geolocation=(), microphone=()'
    if request.is_secure:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


# ═══════════════════════════════════════════════════════════════════════════
# MANEJO DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════

@app.errorhandler(PosError)
def handle_pos_error(e):
    if e.http_status >= 500:
        log_error(f"{request.method} {request.path}", e)
    return jsonify({'ok': False, 'error': e.message}), e.http_status


@app.errorhandler(404)
def handle_not_found(e):
    return jsonify({'ok': False, 'error': 'Recurso no encontrado'}), 404


@app.errorhandler(405)
def handle_method_not_allowed(e):
    return jsonify({'ok': False, 'error': 'Método no permitido'}), 405


@app.errorhandler(500)
def handle_internal_error(e):
    log_error(f"Error interno en {request.method} {request.path}", getattr(e, 'original_exception', None))
    return jsonify({'ok': False, 'error': 'Error interno'}), 500


# ═══════════════════════════════════════════════════════════════════════════
# SESIÓN DEL PERSONAL
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/auth/pin', methods=['POST'])
def login_pin():
    pin = str(json_body().get('pin') or '').strip()
    if not pin:
        return {"ok": False, "error": "PIN requerido"}, 400
    if not _container().settings_service.verify_admin_pin(pin):
        log_warning(f"PIN incorrecto desde {request.remote_addr}")
        return {"ok": False, "error": "PIN incorrecto"}, 401
    session.clear()
    session.permanent = True
    session['role'] = 'admin'
    token = generate_csrf_token()
    log_event("Inicio de sesión del personal")
    return ok(role='admin', csrf_token=token)


@app.route('/api/auth/session', methods=['GET'])
def auth_session():
    if not is_staff():
        return ok(role=None)
    return ok(role=session.get('role'), csrf_token=generate_csrf_token())


@app.route('/api/auth/logout', methods=['POST'])
@login_required
@verify_csrf
def logout():
    session.clear()
    log_event("Cierre de sesión del personal")
    return ok()


# ═══════════════════════════════════════════════════════════════════════════
# TIENDA PÚBLICA
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/store', methods=['GET'])
def store_info():
    settings = _container().settings_service.get_settings()
    public = settings.to_dict(include_pin=False)
    for neighborhood in public['neighborhoods']:
        neighborhood.pop('allowed_streets', None)
    return ok(store=public)


@app.route('/api/menu', methods=['GET'])
def menu():
    return ok(menu=_container().catalog_service.active_menu())


@app.route('/api/slots', methods=['GET'])
def slots():
    try:
        max_slots = int(request.args.get('max', 20))
    except ValueError:
        raise ValidationError('Parámetro max inválido')
    return ok(slots=_container().scheduling_service.available_slots(max_slots=max(1, min(max_slots, 96))))


@app.route('/api/cart/quote', methods=['POST'])
def cart_quote():
    return respond(_container().order_service.quote(json_body()))


@app.route('/api/delivery/check-street', methods=['POST'])
def check_street():
    data = json_body()
    settings = _container().settings_service.get_settings()
    neighborhood = settings.get_neighborhood(str(data.get('neighborhood_id') or ''))
    eligible = is_street_eligible(
        data.get('street') or '',
        neighborhood,
        settings.is_street_validation_enabled,
        parse_enum(PickupType, data.get('pickup_type'), PickupType.DELIVERY),
    )
    return ok(eligible=eligible)


# ═══════════════════════════════════════════════════════════════════════════
# PEDIDOS
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/orders', methods=['POST'])
def create_order():
    data = json_body()
    origin = parse_origin(data.get('origin'))
    if origin not in PUBLIC_ORIGINS or data.get('payment_status') == PaymentStatus.PAID.value:
        # Venta de mostrador / iFood / pago confirmado: solo el personal
        if not is_staff():
            return {"ok": False, "error": "Inicia sesión con el PIN"}, 401
        if not _csrf_valid():
            return {"ok": False, "error": "CSRF token inválido"}, 403

    container = _container()
    result = container.order_service.create_order(data)
    if result.get('ok'):
        result['notification'] = build_order_payload(result['order'], container.settings_service.get_settings())
    return respond(result)


@app.route('/api/orders', methods=['GET'])
@login_required
def list_orders():
    view = request.args.get('view', 'all')
    service = _container().order_service
    if view == 'kanban':
        return ok(columns=service.orders_by_status())
    if view == 'active':
        return ok(orders=service.active_orders())
    return ok(orders=service.list_orders())


@app.route('/api/orders/<order_id>', methods=['GET'])
def get_order(order_id):
    order = _container().order_service.get_order(order_id)
    if order is None:
        raise NotFoundError('Pedido no encontrado')
    return ok(order=order)


@app.route('/api/orders/<order_id>/advance', methods=['POST'])
@login_required
@verify_csrf
def advance_order(order_id):
    return respond(_container().order_service.advance(order_id))


@app.route('/api/orders/<order_id>/cancel', methods=['POST'])
@login_required
@verify_csrf
def cancel_order(order_id):
    return respond(_container().order_service.cancel(order_id))


@app.route('/api/orders/<order_id>/status', methods=['POST'])
@login_required
@verify_csrf
def set_order_status(order_id):
    return respond(_container().order_service.set_status(order_id, json_body().get('status')))


@app.route('/api/orders/<order_id>/payment', methods=['POST'])
@login_required
@verify_csrf
def set_order_payment(order_id):
    data = json_body()
    return respond(_container().order_service.set_payment_status(
        order_id, data.get('payment_status'), data.get('payment_method')))


@app.route('/api/orders/<order_id>/reschedule', methods=['POST'])
@login_required
@verify_csrf
def reschedule_order(order_id):
    return respond(_container().order_service.reschedule(order_id, json_body().get('scheduled_time')))


@app.route('/api/orders/<order_id>/printed', methods=['POST'])
@login_required
@verify_csrf
def mark_order_printed(order_id):
    return respond(_container().order_service.mark_printed(order_id))


@app.route('/api/orders/<order_id>/notification', methods=['GET'])
@login_required
def order_notification(order_id):
    container = _container()
    order = container.order_service.get_order(order_id)
    if order is None:
        raise NotFoundError('Pedido no encontrado')
    return ok(notification=build_order_payload(order, container.settings_service.get_settings()))


@app.route('/api/state', methods=['GET'])
@login_required
def state_snapshot():
    return ok(state=_container().state.snapshot())


# ═══════════════════════════════════════════════════════════════════════════
# CAJA
# ═══════════════════════════════════════════════════════════════════════════

def _responsible(data):
    return (data.get('responsible') or '').strip() or RESPONSIBLE_LABELS.get(session.get('role'), '')


@app.route('/api/cashier', methods=['GET'])
@login_required
def cashier_status():
    return ok(**_container().cashier_service.session_status())


@app.route('/api/cashier/open', methods=['POST'])
@login_required
@verify_csrf
def cashier_open():
    data = json_body()
    return respond(_container().cashier_service.open_session(
        data.get('initial_value', 0), _responsible(data), data.get('note')))


@app.route('/api/cashier/close', methods=['POST'])
@login_required
@verify_csrf
def cashier_close():
    data = json_body()
    return respond(_container().cashier_service.close_session(_responsible(data), data.get('note')))


@app.route('/api/cashier/logs', methods=['GET'])
@login_required
def cashier_logs():
    return ok(logs=_container().cashier_service.list_logs())


@app.route('/api/cashier/logs/<log_id>/report', methods=['GET'])
@login_required
def cashier_report(log_id):
    service = _container().cashier_service
    log = service.get_log(log_id)
    if log is None:
        raise NotFoundError('Registro de caja no encontrado')
    return Response(service.render_close_report(log), mimetype='text/plain; charset=utf-8')


# ═══════════════════════════════════════════════════════════════════════════
# CARDÁPIO (administración)
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/categories', methods=['GET'])
@login_required
def list_categories():
    return ok(categories=_container().catalog_service.list_categories())


@app.route('/api/categories', methods=['POST'])
@app.route('/api/categories/<category_id>', methods=['POST'])
@login_required
@verify_csrf
def save_category(category_id=None):
    data = json_body()
    return respond(_container().catalog_service.save_category(
        data.get('name'), data.get('order'), category_id))


@app.route('/api/categories/<category_id>', methods=['DELETE'])
@login_required
@verify_csrf
def delete_category(category_id):
    return respond(_container().catalog_service.delete_category(category_id))


@app.route('/api/products', methods=['GET'])
@login_required
def list_products():
    return ok(products=_container().catalog_service.list_products())


@app.route('/api/products', methods=['POST'])
@app.route('/api/products/<product_id>', methods=['POST'])
@login_required
@verify_csrf
def save_product(product_id=None):
    return respond(_container().catalog_service.save_product(json_body(), product_id))


@app.route('/api/products/<product_id>/active', methods=['POST'])
@login_required
@verify_csrf
def set_product_active(product_id):
    return respond(_container().catalog_service.set_product_active(
        product_id, bool(json_body().get('is_active'))))


@app.route('/api/products/<product_id>', methods=['DELETE'])
@login_required
@verify_csrf
def delete_product(product_id):
    return respond(_container().catalog_service.delete_product(product_id))


# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN Y BARRIOS
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/settings', methods=['GET'])
@login_required
def get_settings():
    return ok(settings=_container().settings_service.get_settings().to_dict(include_pin=False))


@app.route('/api/settings', methods=['POST'])
@login_required
@verify_csrf
def update_settings():
    data = json_body()
    data.pop('csrf_token', None)
    result = _container().settings_service.update_settings(data)
    if result.get('ok'):
        result['settings'] = result['settings'].to_dict(include_pin=False)
    return respond(result)


@app.route('/api/settings/store-open', methods=['POST'])
@login_required
@verify_csrf
def set_store_open():
    result = _container().settings_service.set_store_open(bool(json_body().get('is_open')))
    if result.get('ok'):
        result['settings'] = result['settings'].to_dict(include_pin=False)
    return respond(result)


@app.route('/api/settings/pin', methods=['POST'])
@login_required
@verify_csrf
def change_pin():
    data = json_body()
    return respond(_container().settings_service.change_admin_pin(
        str(data.get('current_pin') or ''), str(data.get('new_pin') or '')))


@app.route('/api/neighborhoods', methods=['GET'])
@login_required
def list_neighborhoods():
    return ok(neighborhoods=_container().settings_service.get_settings().neighborhoods)


@app.route('/api/neighborhoods', methods=['POST'])
@app.route('/api/neighborhoods/<neighborhood_id>', methods=['POST'])
@login_required
@verify_csrf
def save_neighborhood(neighborhood_id=None):
    data = json_body()
    return respond(_container().settings_service.add_neighborhood(
        data.get('name'),
        data.get('delivery_fee'),
        data.get('estimated_distance_km', 0),
        data.get('allowed_streets'),
        neighborhood_id,
    ))


@app.route('/api/neighborhoods/<neighborhood_id>', methods=['DELETE'])
@login_required
@verify_csrf
def delete_neighborhood(neighborhood_id):
    return respond(_container().settings_service.remove_neighborhood(neighborhood_id))


@app.route('/api/neighborhoods/import', methods=['POST'])
@login_required
@verify_csrf
def import_streets():
    return respond(_container().settings_service.import_streets(json_body().get('text') or ''))


# ═══════════════════════════════════════════════════════════════════════════
# REPORTES
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/reports/dashboard', methods=['GET'])
@login_required
def report_dashboard():
    return ok(stats=_container().report_service.dashboard_stats())


@app.route('/api/reports/sales', methods=['GET'])
@login_required
def report_sales():
    return ok(sales=_container().report_service.sales_overview())


@app.route('/api/reports/products', methods=['GET'])
@login_required
def report_products():
    report = _container().report_service.product_sales_report(
        request.args.get('period', 'today'), request.args.get('search', ''))
    return ok(report=report)


@app.route('/api/reports/products.csv', methods=['GET'])
@login_required
def report_products_csv():
    period = request.args.get('period', 'today')
    output = _container().report_service.export_product_report_csv(period, request.args.get('search', ''))
    filename = f"relatorio_saida_{period}_{datetime.now().strftime('%d-%m-%Y')}.csv"
    return Response(output, mimetype='text/csv; charset=utf-8',
                    headers={'Content-Disposition': f'attachment;filename={filename}'})


@app.route('/api/reports/performance', methods=['GET'])
@login_required
def report_performance():
    """Tiempos de las funciones perfiladas desde que arrancó el proceso."""
    return ok(functions=get_function_stats())


if __name__ == '__main__':
    # Servidor de desarrollo; en producción usar WSGI (wsgi.py)
    log_event(f"Servidor iniciado en http://{config.HOST}:{config.PORT}")
    app.run(host=config.HOST, port=config.PORT, debug=not config.PRODUCTION_MODE)
