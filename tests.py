#!/usr/bin/env python3
"""
BlockCompare Test Suite v1.0.0
==============================
Validates the API endpoints, configuration, and error types.

Engine-level tests live under tests/blocks/.

Run with: python -m pytest tests.py -v
Or standalone: python tests.py
"""

import os
import sys
import json
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

# Import application
from app import app
from config_logging import (
    AppConfig, get_config, reset_config, VERSION,
    ValidationError, ProcessingError, TreeError, InvariantError, BlockCompareError
)


class TestCompareEndpoint(unittest.TestCase):
    """Test POST /api/compare/blocks."""

    def setUp(self):
        """Set up test client."""
        app.config['TESTING'] = True
        self.client = app.test_client()
        self.ctx = app.app_context()
        self.ctx.push()

    def tearDown(self):
        """Clean up."""
        self.ctx.pop()

    def _post(self, payload):
        return self.client.post('/api/compare/blocks', data=json.dumps(payload),
                                content_type='application/json')

    def test_compare_returns_annotated_html(self):
        """
        Test a basic comparison round trip.

        Expects: 200 with summary counts and both annotated panes.
        """
        response = self._post({
            'left_html': '<p>Hello</p><p>The cat sat</p>',
            'right_html': '<p>Hello</p><p>The dog sat</p><p>World</p>'
        })
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertTrue(data['success'])
        self.assertEqual(data['data']['summary'], {'additions': 1, 'deletions': 0, 'changes': 1})
        self.assertFalse(data['data']['degraded'])
        self.assertIn('word-deleted', data['data']['left_html'])
        self.assertIn('block-placeholder', data['data']['left_html'])
        self.assertIn('block-added', data['data']['right_html'])
        self.assertNotIn('left_nodes', data['data'])

    def test_include_nodes(self):
        """
        Test include_nodes adds the structured output sequences.

        Expects: left_nodes/right_nodes of equal length with states.
        """
        response = self._post({
            'left_html': '<p>Hello</p>',
            'right_html': '<p>Hello</p><p>World</p>',
            'include_nodes': True
        })
        data = json.loads(response.data)['data']
        self.assertEqual(len(data['left_nodes']), len(data['right_nodes']))
        self.assertEqual([n['state'] for n in data['left_nodes']], ['unchanged', 'placeholder'])
        self.assertEqual(data['right_nodes'][1]['text'], 'World')
        self.assertEqual(data['left_nodes'][1]['placeholder_for'], 'added')

    def test_identical_documents(self):
        """
        Test comparing a document with itself.

        Expects: zero summary.
        """
        html = '<p>One</p><table><tr><td>x</td></tr></table><img src="a.png">'
        data = json.loads(self._post({'left_html': html, 'right_html': html}).data)['data']
        self.assertEqual(data['summary'], {'additions': 0, 'deletions': 0, 'changes': 0})

    def test_missing_field(self):
        """
        Test request without right_html.

        Expects: 400 with VALIDATION_ERROR.
        """
        response = self._post({'left_html': '<p>x</p>'})
        self.assertEqual(response.status_code, 400)
        data = json.loads(response.data)
        self.assertFalse(data['success'])
        self.assertEqual(data['error']['code'], 'VALIDATION_ERROR')
        self.assertIn('right_html', data['error']['message'])

    def test_non_string_field(self):
        """
        Test request with a non-string document.

        Expects: 400 with VALIDATION_ERROR.
        """
        response = self._post({'left_html': ['<p>x</p>'], 'right_html': '<p>x</p>'})
        self.assertEqual(response.status_code, 400)

    def test_body_must_be_object(self):
        """
        Test a JSON array body.

        Expects: 400 with VALIDATION_ERROR.
        """
        response = self._post(['<p>x</p>', '<p>y</p>'])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(json.loads(response.data)['error']['code'], 'VALIDATION_ERROR')

    def test_invalid_json(self):
        """
        Test a malformed body.

        Expects: 400 with INVALID_JSON.
        """
        response = self.client.post('/api/compare/blocks', data='{not json',
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(json.loads(response.data)['error']['code'], 'INVALID_JSON')

    def test_correlation_id_echoed_in_errors(self):
        """
        Test the X-Correlation-ID header flows into error responses.

        Expects: error.correlation_id equals the header value.
        """
        response = self.client.post('/api/compare/blocks', data=json.dumps({}),
                                    content_type='application/json',
                                    headers={'X-Correlation-ID': 'req-123'})
        self.assertEqual(json.loads(response.data)['error']['correlation_id'], 'req-123')

    def test_include_nodes_requires_boolean(self):
        """
        Test that a string "false" does not enable include_nodes.

        Expects: no node sequences unless include_nodes is JSON true.
        """
        for flag in ("false", "true", 1):
            response = self._post({'left_html': '<p>a</p>', 'right_html': '<p>a</p>',
                                   'include_nodes': flag})
            self.assertEqual(response.status_code, 200)
            self.assertNotIn('left_nodes', json.loads(response.data)['data'])

    def test_generated_correlation_id(self):
        """
        Test a correlation id is generated when the header is absent.

        Expects: a 12-character id in the error body.
        """
        response = self._post({})
        correlation_id = json.loads(response.data)['error']['correlation_id']
        self.assertEqual(len(correlation_id), 12)
        self.assertNotEqual(correlation_id, 'unknown')

    def test_payload_too_large(self):
        """
        Test bodies over MAX_CONTENT_LENGTH.

        Expects: 413 with PAYLOAD_TOO_LARGE.
        """
        original = app.config['MAX_CONTENT_LENGTH']
        app.config['MAX_CONTENT_LENGTH'] = 64
        try:
            response = self._post({'left_html': 'x' * 200, 'right_html': ''})
        finally:
            app.config['MAX_CONTENT_LENGTH'] = original
        self.assertEqual(response.status_code, 413)
        self.assertEqual(json.loads(response.data)['error']['code'], 'PAYLOAD_TOO_LARGE')


class TestInfoEndpoints(unittest.TestCase):
    """Test health and config endpoints."""

    def setUp(self):
        """Set up test client."""
        app.config['TESTING'] = True
        self.client = app.test_client()

    def test_health(self):
        """
        Test the health endpoint.

        Expects: status ok with the application version.
        """
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertEqual(data['status'], 'ok')
        self.assertEqual(data['version'], VERSION)

    def test_comparison_config(self):
        """
        Test GET /api/compare/blocks/config.

        Expects: the active threshold and timeout.
        """
        response = self.client.get('/api/compare/blocks/config')
        data = json.loads(response.data)['data']
        self.assertEqual(data['similarity_threshold'], get_config().similarity_threshold)
        self.assertEqual(data['diff_timeout'], get_config().diff_timeout)
        self.assertIn('strict', data)

    def test_404_returns_json(self):
        """
        Test unknown routes.

        Expects: 404 with success=False.
        """
        response = self.client.get('/api/nonexistent')
        self.assertEqual(response.status_code, 404)
        self.assertFalse(json.loads(response.data)['success'])


class TestConfig(unittest.TestCase):
    """Test AppConfig loading and validation."""

    def tearDown(self):
        """Drop any config built from patched environment."""
        reset_config()

    def test_defaults(self):
        """
        Test defaults with no environment overrides.

        Expects: threshold 0.6, unlimited diff timeout, non-strict.
        """
        with patch.dict(os.environ, {}, clear=True):
            cfg = AppConfig.from_env()
        self.assertEqual(cfg.similarity_threshold, 0.6)
        self.assertEqual(cfg.diff_timeout, 0.0)
        self.assertFalse(cfg.strict)
        self.assertFalse(cfg.debug)
        self.assertEqual(cfg.host, '127.0.0.1')

    def test_from_env(self):
        """
        Test environment overrides.

        Expects: BC_* variables are read and typed.
        """
        env = {
            'BC_SIMILARITY_THRESHOLD': '0.75',
            'BC_DIFF_TIMEOUT': '2.5',
            'BC_STRICT': 'true',
            'BC_PORT': '8080',
            'BC_LOG_FORMAT': 'text',
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = AppConfig.from_env()
        self.assertEqual(cfg.similarity_threshold, 0.75)
        self.assertEqual(cfg.diff_timeout, 2.5)
        self.assertTrue(cfg.strict)
        self.assertEqual(cfg.port, 8080)
        self.assertEqual(cfg.log_format, 'text')

    def test_production_never_strict(self):
        """
        Test BC_ENV=production overrides.

        Expects: strict and debug forced off, WARNING log level.
        """
        with patch.dict(os.environ, {'BC_ENV': 'production', 'BC_STRICT': 'true',
                                     'BC_DEBUG': 'true'}, clear=True):
            cfg = AppConfig.from_env()
        self.assertFalse(cfg.strict)
        self.assertFalse(cfg.debug)
        self.assertEqual(cfg.log_level, 'WARNING')

    def test_validate(self):
        """
        Test validation of out-of-range values.

        Expects: one error per bad field.
        """
        self.assertEqual(AppConfig().validate(), (True, []))

        is_valid, errors = AppConfig(similarity_threshold=1.5, diff_timeout=-1,
                                     log_format='xml').validate()
        self.assertFalse(is_valid)
        self.assertEqual(len(errors), 3)

    def test_get_config_is_cached(self):
        """
        Test the global config instance.

        Expects: same object until reset_config().
        """
        first = get_config()
        self.assertIs(get_config(), first)
        reset_config()
        self.assertIsNot(get_config(), first)


class TestErrorTypes(unittest.TestCase):
    """Test exception hierarchy and serialization."""

    def test_validation_error_structure(self):
        """
        Test ValidationError has correct structure.

        Expects: status_code=400, code=VALIDATION_ERROR, proper to_dict().
        """
        err = ValidationError("Test error", field="left_html")
        self.assertEqual(err.status_code, 400)
        self.assertEqual(err.code, "VALIDATION_ERROR")

        error_dict = err.to_dict()
        self.assertFalse(error_dict['success'])
        self.assertEqual(error_dict['error']['details']['field'], 'left_html')

    def test_processing_errors(self):
        """
        Test engine error subclasses.

        Expects: both are ProcessingErrors with their own codes and stages.
        """
        tree_error = TreeError("bad tree")
        invariant_error = InvariantError("bad partition", side='left')

        for err in (tree_error, invariant_error):
            self.assertIsInstance(err, ProcessingError)
            self.assertIsInstance(err, BlockCompareError)
            self.assertEqual(err.status_code, 500)

        self.assertEqual(tree_error.code, 'TREE_ERROR')
        self.assertEqual(tree_error.details['stage'], 'extract')
        self.assertEqual(invariant_error.code, 'INVARIANT_ERROR')
        self.assertEqual(invariant_error.details['side'], 'left')


class TestVersionConsistency(unittest.TestCase):
    """Test version consistency across modules."""

    def test_version_string_format(self):
        """
        Test version string is properly formatted.

        Expects: Three numeric parts separated by dots.
        """
        parts = VERSION.split('.')
        self.assertEqual(len(parts), 3)
        for part in parts:
            self.assertTrue(part.isdigit())

    def test_package_version_matches(self):
        """
        Test block_compare.__version__ matches version.json.

        Expects: Both versions are identical strings.
        """
        from block_compare import __version__
        self.assertEqual(VERSION, __version__)


class TestCodeQuality(unittest.TestCase):
    """Static code quality checks."""

    def test_no_bare_except(self):
        """
        Test source files have no bare except clauses.

        Expects: Zero matches for '^\\s*except:\\s*$'.
        """
        import re
        root = Path(__file__).parent
        sources = [root / 'app.py', root / 'config_logging.py']
        sources += sorted((root / 'block_compare').glob('*.py'))
        for path in sources:
            content = path.read_text(encoding='utf-8')
            bare_excepts = re.findall(r'^\s*except:\s*$', content, re.MULTILINE)
            self.assertEqual(len(bare_excepts), 0,
                f"Found {len(bare_excepts)} bare 'except:' clauses in {path.name}")


def run_tests():
    """Run all tests and return results."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    test_classes = [
        TestCompareEndpoint,
        TestInfoEndpoints,
        TestConfig,
        TestErrorTypes,
        TestVersionConsistency,
        TestCodeQuality,
    ]

    for test_class in test_classes:
        suite.addTests(loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=2)
    return runner.run(suite)


if __name__ == '__main__':
    result = run_tests()
    sys.exit(0 if result.wasSuccessful() else 1)
