"""
Flask Web Dashboard for epicstyle

This module provides a JSON API to analyze C projects, list the rule catalog,
and run the auto fixer (dry run by default) from a browser or another tool.
"""

import os
import logging
from typing import Dict, Any, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from ..config import MAX_LEVEL, MIN_LEVEL
from ..core.analyzer import StyleAnalyzer
from ..core.collector import InputPathError
from ..core.fixer import AutoFixer, FixerError
from ..core.rules import RULE_CATALOG, NOOP_RULES

logger = logging.getLogger(__name__)


class StyleDashboard:
    """Dashboard state: the last analyzed path and its report."""

    def __init__(self):
        self.current_project_path: Optional[str] = None
        self.last_report = None

    def analyze(self, path: str, level: int) -> Dict[str, Any]:
        """
        Analyze a file or directory.

        Args:
            path: Path to analyze
            level: Verification level

        Returns:
            Dictionary with the report
        """
        try:
            report = StyleAnalyzer(level).analyze_path(path)
        except InputPathError as e:
            logger.error(f"Error analyzing {path}: {e}")
            return {'success': False, 'error': str(e)}

        self.current_project_path = path
        self.last_report = report
        return {
            'success': True,
            'path': path,
            'level': level,
            'report': report.to_dict()
        }

    def fix(self, path: str, dry_run: bool) -> Dict[str, Any]:
        """Run the fixer on a path and return one entry per file. Renames are applied unless dry_run."""
        fixer = AutoFixer(dry_run=dry_run)
        try:
            outcomes = fixer.fix_path(path)
        except InputPathError as e:
            logger.error(f"Error fixing {path}: {e}")
            return {'success': False, 'error': str(e)}

        files = []
        for outcome in outcomes:
            if outcome.error:
                files.append({'filepath': outcome.filepath, 'error': outcome.error})
                continue

            entry = {'filepath': outcome.filepath, **outcome.result.to_dict()}
            try:
                fixer.apply_rename(outcome.filepath, outcome.result)
            except FixerError as e:
                logger.error(str(e))
                entry['error'] = str(e)
            files.append(entry)

        return {
            'success': True,
            'dry_run': dry_run,
            'files': files,
            'total_fixes': sum(len(f.get('fixes', [])) for f in files)
        }


def _parse_level(value) -> Optional[int]:
    try:
        level = int(value)
    except (TypeError, ValueError):
        return None
    if MIN_LEVEL <= level <= MAX_LEVEL:
        return level
    return None


def create_app(config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    if config:
        app.config.update(config)

    # Enable CORS for API endpoints
    CORS(app)

    dashboard = StyleDashboard()

    @app.route('/api/rules')
    def api_rules():
        """API endpoint listing the rules active at a level."""
        level = _parse_level(request.args.get('level', MAX_LEVEL))
        if level is None:
            return jsonify({'success': False, 'error': 'Level must be 1 or 2'}), 400

        rules = [
            {
                'code': rule.code,
                'name': rule.name,
                'description': rule.description,
                'severity': rule.severity.value,
                'level': rule.level,
                'checked': rule.code not in NOOP_RULES
            }
            for rule in RULE_CATALOG if rule.level <= level
        ]
        return jsonify({'success': True, 'level': level, 'rules': rules})

    @app.route('/api/analyze', methods=['POST'])
    def api_analyze():
        """API endpoint to analyze a file or directory."""
        data = request.get_json(silent=True) or {}
        path = data.get('path')

        if not path:
            return jsonify({'success': False, 'error': 'Path is required'}), 400

        if not os.path.exists(path):
            return jsonify({'success': False, 'error': 'Path does not exist'}), 400

        level = _parse_level(data.get('level', MIN_LEVEL))
        if level is None:
            return jsonify({'success': False, 'error': 'Level must be 1 or 2'}), 400

        return jsonify(dashboard.analyze(path, level))

    @app.route('/api/fix', methods=['POST'])
    def api_fix():
        """API endpoint to fix files. Dry run unless dry_run is false."""
        data = request.get_json(silent=True) or {}
        path = data.get('path')

        if not path:
            return jsonify({'success': False, 'error': 'Path is required'}), 400

        if not os.path.exists(path):
            return jsonify({'success': False, 'error': 'Path does not exist'}), 400

        dry_run = data.get('dry_run', True)
        if not isinstance(dry_run, bool):
            return jsonify({'success': False, 'error': 'dry_run must be a boolean'}), 400

        return jsonify(dashboard.fix(path, dry_run))

    @app.route('/api/report')
    def api_report():
        """API endpoint returning the last analysis report."""
        if dashboard.last_report is None:
            return jsonify({'success': False, 'error': 'No analysis has been run'}), 404
        return jsonify({
            'success': True,
            'path': dashboard.current_project_path,
            'report': dashboard.last_report.to_dict()
        })

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({'success': False, 'error': 'Endpoint not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {error}")
        return jsonify({'success': False, 'error': 'Internal server error'}), 500

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='127.0.0.1', port=8080)
