"""Status controller exposing what the watch loop is doing."""
import logging
from flask import current_app
from flask_restx import Namespace, Resource, fields

logger = logging.getLogger(__name__)

api = Namespace('status', description='Signal watcher status')

attempt_model = api.model('ShutdownAttempt', {
    'method': fields.String(description='Shutdown method name', example='nsenter'),
    'succeeded': fields.Boolean(description='Whether the method succeeded', example=False),
    'error': fields.String(description='Failure detail', example='nsenter poweroff failed'),
})

status_model = api.model('WatcherStatus', {
    'state': fields.String(description='Loop state', example='running'),
    'cycles': fields.Integer(description='Detection cycles performed', example=12),
    'triggers_detected': fields.Integer(description='Signals consumed', example=0),
    'last_check_at': fields.String(description='UTC time of the last check', example='2025-11-03T12:00:00Z'),
    'last_error': fields.String(description='Most recent error, if any', example=None),
    'last_shutdown_succeeded': fields.Boolean(description='Outcome of the last shutdown run'),
    'last_shutdown_attempts': fields.List(fields.Nested(attempt_model)),
    'hostname': fields.String(description='Host the agent runs on', example='node-1'),
    'service': fields.String(description='Service name', example='signalmice'),
    'redis_key': fields.String(description='Monitored key',
                               example='signalmice:00000000-0000-0000-0000-000000000000'),
    'check_interval': fields.Float(description='Seconds between checks', example=60),
})

error_model = api.model('StatusError', {
    'error': fields.String(description='Error message', example='Watcher unavailable')
})


@api.route('/')
class WatcherStatus(Resource):
    """Read-only view of the control loop."""

    @api.doc('get_status', description='Return the current watcher status')
    @api.marshal_with(status_model)
    @api.response(200, 'Current status', status_model)
    @api.response(503, 'Watcher unavailable', error_model)
    def get(self):
        """Return the current watcher status."""
        control_loop = current_app.config.get('CONTROL_LOOP')
        identity = current_app.config.get('IDENTITY')
        if control_loop is None:
            logger.error("Status requested before the control loop was registered")
            api.abort(503, error='Watcher unavailable')

        status = control_loop.status()
        status['check_interval'] = control_loop.interval
        if identity is not None:
            status['hostname'] = identity.hostname
            status['service'] = identity.service
            status['redis_key'] = identity.monitored_key
        return status
