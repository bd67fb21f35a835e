import logging
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from badge_print_bridge.bridge import (
    BridgeError,
    ClientError,
    DeviceError,
    PrintBridge,
    new_request_id,
)
from badge_print_bridge.config import BridgeConfig
from badge_print_bridge.handlers import BaseHandler, ZPLHandler
from badge_print_bridge.models import ErrorType

DOCUMENT = '^XA\n^PW640\n^LL400\n^FO75,40^FDAda^FS\n^PQ1\n^XZ'


class ExplodingHandler(BaseHandler):
    def send(self, data, timeout):
        raise MemoryError('out of buffers')


def test_error_classes():
    assert issubclass(ClientError, BridgeError)
    assert issubclass(DeviceError, BridgeError)
    assert (ClientError.status_code, DeviceError.status_code, BridgeError.status_code) == (400, 502, 500)
    assert ClientError.error_type == ErrorType.CLIENT
    assert DeviceError.error_type == ErrorType.DEVICE


def test_default_handler_is_raw_socket_zpl(bridge):
    assert bridge.handler_class is ZPLHandler


def test_request_ids_are_unique():
    assert len({new_request_id() for _ in range(100)}) == 100


def test_health_reports_default_printer():
    bridge = PrintBridge(BridgeConfig(default_printer_host='10.0.0.5', default_printer_port=6101))
    health = bridge.health()

    assert health['status'] == 'ok'
    assert health['defaultPrinterHost'] == '10.0.0.5'
    assert health['defaultPrinterPort'] == 6101
    assert health['timestamp']


def test_health_without_default_printer(bridge):
    assert bridge.health()['defaultPrinterHost'] is None


class TestParseRequest:

    def test_defaults(self):
        bridge = PrintBridge(BridgeConfig(default_printer_host='printer.local'))
        request = bridge.parse_request({'document': f'  {DOCUMENT}\n'})

        assert request.document == DOCUMENT
        assert request.target_host == 'printer.local'
        assert request.target_port == 9100
        assert request.timeout_ms == 10000

    def test_explicit_values_override_defaults(self):
        bridge = PrintBridge(BridgeConfig(default_printer_host='printer.local'))
        request = bridge.parse_request({
            'document': DOCUMENT,
            'targetHost': ' 192.168.1.50 ',
            'targetPort': '6101',
            'timeoutMs': 2500,
        })

        assert request.target_host == '192.168.1.50'
        assert request.target_port == 6101
        assert request.timeout_ms == 2500

    def test_legacy_field_names(self, bridge):
        request = bridge.parse_request({
            'zpl': DOCUMENT,
            'printerIp': '192.168.1.50',
            'printerPort': 9101,
            'timeout': 3000,
        })

        assert request.document == DOCUMENT
        assert request.target_host == '192.168.1.50'
        assert request.target_port == 9101
        assert request.timeout_ms == 3000

    @pytest.mark.parametrize('payload', [
        None,
        {},
        {'document': ''},
        {'document': '  \n\t '},
        {'document': 42},
    ])
    def test_document_required(self, bridge, payload):
        with pytest.raises(ClientError, match='document is required'):
            bridge.parse_request(payload)

    def test_host_required_without_default(self, bridge):
        with pytest.raises(ClientError, match='host is required'):
            bridge.parse_request({'document': DOCUMENT, 'targetHost': '  '})

    @pytest.mark.parametrize('port', [0, 70000, 'abc', True, 91.5, [9100]])
    def test_bad_port(self, bridge, port):
        with pytest.raises(ClientError, match='targetPort'):
            bridge.parse_request({'document': DOCUMENT, 'targetHost': 'h', 'targetPort': port})

    @pytest.mark.parametrize('timeout', [0, -1, 'soon', '1e400', 600_001, 10 ** 20, 10 ** 400])
    def test_bad_timeout(self, bridge, timeout):
        with pytest.raises(ClientError, match='timeoutMs'):
            bridge.parse_request({'document': DOCUMENT, 'targetHost': 'h', 'timeoutMs': timeout})


def test_empty_document_makes_no_connection(bridge, mock_printer):
    result = bridge.submit({
        'document': '   ',
        'targetHost': mock_printer.host,
        'targetPort': mock_printer.port,
    }, request_id='req-1')

    assert result.success is False
    assert result.error_type == ErrorType.CLIENT
    assert result.request_id == 'req-1'
    time.sleep(0.2)
    assert mock_printer.connections == 0


def test_submit_success(bridge, mock_printer):
    result = bridge.submit({
        'document': DOCUMENT,
        'targetHost': mock_printer.host,
        'targetPort': mock_printer.port,
    })

    assert result.success is True
    assert result.target_host == mock_printer.host
    assert result.target_port == mock_printer.port
    assert result.bytes_sent == len(DOCUMENT)
    assert result.request_id
    assert mock_printer.wait()
    assert mock_printer.received == [DOCUMENT.encode()]
    assert mock_printer.connections == 1


def test_submit_uses_default_printer(mock_printer):
    bridge = PrintBridge(BridgeConfig(
        default_printer_host=mock_printer.host,
        default_printer_port=mock_printer.port,
    ))
    result = bridge.submit({'zpl': DOCUMENT})

    assert result.success is True
    assert mock_printer.wait()
    assert mock_printer.received == [DOCUMENT.encode()]


def test_submit_refused_is_device_error(bridge, closed_port):
    start = time.monotonic()
    result = bridge.submit({
        'document': DOCUMENT,
        'targetHost': '127.0.0.1',
        'targetPort': closed_port,
        'timeoutMs': 3000,
    })

    assert result.success is False
    assert result.error_type == ErrorType.DEVICE
    assert 'refused' in result.error.lower()
    assert result.target_host == '127.0.0.1'
    assert result.target_port == closed_port
    assert time.monotonic() - start < 3


def test_submit_times_out(bridge, printer_factory):
    printer = printer_factory(mode='hold', rcvbuf=4096)

    start = time.monotonic()
    result = bridge.submit({
        'document': 'X' * (32 * 1024 * 1024),
        'targetHost': printer.host,
        'targetPort': printer.port,
        'timeoutMs': 500,
    })

    assert result.success is False
    assert result.error_type == ErrorType.DEVICE
    assert 'timed out' in result.error
    assert time.monotonic() - start < 2.0


def test_unexpected_handler_error_is_internal(config, mock_printer):
    bridge = PrintBridge(config, handler_class=ExplodingHandler)
    result = bridge.submit({
        'document': DOCUMENT,
        'targetHost': mock_printer.host,
        'targetPort': mock_printer.port,
    })

    assert result.success is False
    assert result.error_type == ErrorType.INTERNAL
    assert result.error == 'out of buffers'
    assert result.target_port == mock_printer.port


def test_log_lines_carry_request_id(bridge, mock_printer, caplog):
    caplog.set_level(logging.INFO, logger='badge_print_bridge')
    bridge.submit({
        'document': DOCUMENT,
        'targetHost': mock_printer.host,
        'targetPort': mock_printer.port,
    }, request_id='abc-123')

    messages = [r.getMessage() for r in caplog.records if r.name == 'badge_print_bridge.bridge']
    assert messages
    assert all(m.startswith('[abc-123]') for m in messages)
    assert any(f'Sent {len(DOCUMENT)} bytes to {mock_printer.host}:{mock_printer.port}' in m
               for m in messages)


def test_concurrent_submits_are_independent(bridge, printer_factory, caplog):
    caplog.set_level(logging.INFO, logger='badge_print_bridge')
    first = printer_factory()
    second = printer_factory()
    jobs = {
        'job-a': (first, '^XA\n^FDfirst^FS\n^PQ1\n^XZ'),
        'job-b': (second, '^XA\n^FDsecond^FS\n^PQ2\n^XZ'),
    }

    def run(request_id):
        printer, document = jobs[request_id]
        return bridge.submit({
            'document': document,
            'targetHost': printer.host,
            'targetPort': printer.port,
        }, request_id=request_id)

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = dict(zip(jobs, pool.map(run, jobs)))

    for request_id, (printer, document) in jobs.items():
        result = results[request_id]
        assert result.success is True
        assert result.request_id == request_id
        assert result.target_port == printer.port
        assert printer.wait()
        assert printer.received == [document.encode()]

        other = second if printer is first else first
        lines = [r.getMessage() for r in caplog.records
                 if r.getMessage().startswith(f'[{request_id}]')]
        assert lines
        assert all(f':{other.port}' not in line for line in lines)


def test_huge_timeout_is_client_error(bridge, mock_printer):
    result = bridge.submit({
        'document': DOCUMENT,
        'targetHost': mock_printer.host,
        'targetPort': mock_printer.port,
        'timeoutMs': 10 ** 20,
    })

    assert result.success is False
    assert result.error_type == ErrorType.CLIENT
    assert 'timeoutMs' in result.error
    time.sleep(0.2)
    assert mock_printer.connections == 0


def test_deliver_raises_device_error(bridge, closed_port):
    request = bridge.parse_request({
        'document': DOCUMENT,
        'targetHost': '127.0.0.1',
        'targetPort': closed_port,
    })

    with pytest.raises(DeviceError, match='refused'):
        bridge.deliver(request, 'req-2')
