#!/usr/bin/env python3
"""
Configuration and logging tests

Run with: python3 tests/test_config.py
"""
import io
import json
import sys
import tempfile
from pathlib import Path
from unittest import mock

from helpers import TestRunner
from gh_signoff.config import SignoffConfig, deep_merge, load_yaml
from gh_signoff.logger import FileHandler, JsonLogger, StreamHandler, get_logger


def test_load_yaml(runner: TestRunner):
    """YAML files load as mappings, problems give empty dicts."""
    print("\n📦 Testing YAML loading...")

    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / 'config.yaml'
        runner.test("Missing file", load_yaml(path) == {})

        path.write_text('repo: acme/widgets\nlogging:\n  level: debug\n')
        runner.test("Mapping loaded",
                    load_yaml(path) == {'repo': 'acme/widgets', 'logging': {'level': 'debug'}})

        path.write_text('')
        runner.test("Empty file", load_yaml(path) == {})

        path.write_text('- just\n- a list\n')
        with mock.patch('sys.stderr', new=io.StringIO()):
            runner.test("Non-mapping ignored", load_yaml(path) == {})

        path.write_text('repo: [unclosed\n')
        with mock.patch('sys.stderr', new=io.StringIO()):
            runner.test("Parse error ignored", load_yaml(path) == {})


def test_deep_merge(runner: TestRunner):
    base = {'logging': {'level': 'error', 'destinations': ['file']}, 'repo': 'a/b'}
    deep_merge(base, {'logging': {'level': 'info'}, 'repo': 'c/d'})
    runner.test("Nested keys merged",
                base == {'logging': {'level': 'info', 'destinations': ['file']}, 'repo': 'c/d'},
                str(base))


def test_config_cascade(runner: TestRunner):
    """global → project → local precedence."""
    print("\n📦 Testing config cascade...")

    with tempfile.TemporaryDirectory() as home, tempfile.TemporaryDirectory() as project:
        home_dir = Path(home)
        (home_dir / 'config.yaml').write_text(
            'repo: global/repo\nlogging:\n  level: info\n  destinations: [stdout]\n'
        )
        (Path(project) / '.signoff.yaml').write_text('repo: team/repo\n')
        (Path(project) / '.signoff.local.yaml').write_text('logging:\n  level: debug\n')

        with mock.patch('gh_signoff.config.get_global_config_dir', return_value=home_dir):
            config = SignoffConfig(project)

        runner.test("Project overrides global repo", config.get_repo() == 'team/repo', config.get_repo())
        logging_config = config.get_logging_config()
        runner.test("Local overrides level", logging_config['level'] == 'debug', str(logging_config))
        runner.test("Global destinations kept", logging_config['destinations'] == ['stdout'])
        runner.test("Default log file under config dir",
                    logging_config['file'] == str(home_dir / 'signoff.log'), logging_config['file'])
        runner.test("No validation errors", config.get_validation_errors() == [])

    with tempfile.TemporaryDirectory() as home, tempfile.TemporaryDirectory() as project:
        with mock.patch('gh_signoff.config.get_global_config_dir', return_value=Path(home)):
            config = SignoffConfig(project)
        runner.test("No files: repo unset", config.get_repo() is None)
        runner.test("No files: error level", config.get_logging_config()['level'] == 'error')


def test_config_validation(runner: TestRunner):
    """Invalid values are dropped with a recorded error."""
    print("\n📦 Testing config validation...")

    with tempfile.TemporaryDirectory() as home, tempfile.TemporaryDirectory() as project:
        (Path(project) / '.signoff.yaml').write_text(
            'repo: not a repo\nlogging:\n  level: loud\n  destinations: [syslog]\n'
        )
        with mock.patch('gh_signoff.config.get_global_config_dir', return_value=Path(home)), \
                mock.patch('sys.stderr', new=io.StringIO()) as stderr:
            config = SignoffConfig(project)

        errors = config.get_validation_errors()
        runner.test("Three errors recorded", len(errors) == 3, str(errors))
        runner.test("Errors printed", 'Config validation error' in stderr.getvalue())
        runner.test("Bad repo dropped", config.get_repo() is None)
        runner.test("Bad level reset", config.get_logging_config()['level'] == 'error')
        runner.test("Bad destinations reset", config.get_logging_config()['destinations'] == ['file'])

    with tempfile.TemporaryDirectory() as home, tempfile.TemporaryDirectory() as project:
        (Path(project) / '.signoff.yaml').write_text('logging: verbose\n')
        with mock.patch('gh_signoff.config.get_global_config_dir', return_value=Path(home)), \
                mock.patch('sys.stderr', new=io.StringIO()):
            config = SignoffConfig(project)
        runner.test("Non-mapping logging replaced",
                    config.get_logging_config()['level'] == 'error'
                    and len(config.get_validation_errors()) == 1)


def test_logger(runner: TestRunner):
    """JSON records, levels, bound context."""
    print("\n📦 Testing logger...")

    stream = io.StringIO()
    logger = JsonLogger(level='info', handlers=[StreamHandler(stream)], context={'command': 'create'})
    logger.debug("hidden")
    logger.bind(sha='abc', skipped=None).info("Signed off", context='signoff/tests')

    lines = stream.getvalue().splitlines()
    runner.test("Below level filtered", len(lines) == 1, str(lines))
    record = json.loads(lines[0])
    runner.test("Message and level", record['message'] == 'Signed off' and record['level'] == 'info')
    runner.test("Bound context included",
                record['command'] == 'create' and record['sha'] == 'abc'
                and record['context'] == 'signoff/tests', str(record))
    runner.test("None fields dropped", 'skipped' not in record)
    runner.test("UTC timestamp", record['timestamp'].endswith('Z'), record['timestamp'])

    with tempfile.TemporaryDirectory() as tmpdir:
        log_file = Path(tmpdir) / 'nested' / 'signoff.log'
        file_logger = get_logger({'level': 'error', 'destinations': ['file'], 'file': str(log_file)})
        runner.test("File handler built", isinstance(file_logger.handlers[0], FileHandler))
        file_logger.error("Signoff failed", context='signoff/macos')
        written = json.loads(log_file.read_text().splitlines()[0])
        runner.test("Record appended to file", written['context'] == 'signoff/macos')

    runner.test("No destinations, no handlers", get_logger({'destinations': []}).handlers == [])


def main():
    """Run all tests."""
    print("🧪 Config & Logging Tests")
    print("=" * 50)

    runner = TestRunner()

    test_load_yaml(runner)
    test_deep_merge(runner)
    test_config_cascade(runner)
    test_config_validation(runner)
    test_logger(runner)

    return runner.summary()


if __name__ == '__main__':
    sys.exit(main())
