"""Test CLI functionality."""

from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from contractgen.cli import app
from contractgen.codegen.codegen import GenerationResult
from contractgen.config import CodegenConfig, DocumentConfig
from contractgen.exceptions import ConfigurationError, InvalidEnumValueError

from .fixtures import PETSTORE_SPEC, get_spec_as_yaml


@pytest.fixture
def runner():
    """Fixture providing CLI test runner."""
    return CliRunner()


@pytest.fixture
def sample_config():
    """Fixture providing sample configuration."""
    return CodegenConfig(
        documents=[DocumentConfig(source='./openapi.yaml', output='./generated')]
    )


@pytest.fixture
def sample_result():
    return GenerationResult(
        declarations=[],
        operations=[],
        operations_by_tag={},
        parameter_types={},
        written_files=['generated/models/index.ts'],
    )


class TestGenerateCommand:
    """Test the generate command."""

    @patch('contractgen.cli.get_config')
    @patch('contractgen.cli.Codegen')
    def test_generate_without_config_file(
        self, mock_codegen_class, mock_get_config, runner, sample_config, sample_result
    ):
        """Test generate command without specifying config file."""
        mock_get_config.return_value = sample_config
        mock_codegen_instance = MagicMock()
        mock_codegen_instance.generate.return_value = sample_result
        mock_codegen_class.return_value = mock_codegen_instance

        result = runner.invoke(app, ['generate'])

        assert result.exit_code == 0
        mock_get_config.assert_called_once_with(None)
        mock_codegen_class.assert_called_once_with(sample_config.documents[0])
        mock_codegen_instance.generate.assert_called_once()
        assert 'generated/models/index.ts' in result.stdout

    @patch('contractgen.cli.get_config')
    @patch('contractgen.cli.Codegen')
    def test_generate_with_short_config_option(
        self, mock_codegen_class, mock_get_config, runner, sample_config, sample_result
    ):
        """Test generate command with short config option."""
        mock_get_config.return_value = sample_config
        mock_codegen_class.return_value.generate.return_value = sample_result

        result = runner.invoke(app, ['generate', '-c', 'custom.yaml'])

        assert result.exit_code == 0
        mock_get_config.assert_called_once_with('custom.yaml')

    @patch('contractgen.cli.get_config')
    @patch('contractgen.cli.Codegen')
    def test_source_and_output_bypass_config(
        self, mock_codegen_class, mock_get_config, runner, sample_result
    ):
        """Test that --source/--output build the document config directly."""
        mock_codegen_class.return_value.generate.return_value = sample_result

        result = runner.invoke(
            app,
            [
                'generate',
                '-s',
                'api.yaml',
                '-o',
                'out',
                '--models-folder',
                'types',
                '--middleware-config',
                'mw.yaml',
            ],
        )

        assert result.exit_code == 0
        mock_get_config.assert_not_called()
        document_config = mock_codegen_class.call_args.args[0]
        assert document_config.source == 'api.yaml'
        assert document_config.output == 'out'
        assert document_config.models_folder == 'types'
        assert document_config.middleware_config == 'mw.yaml'

    def test_source_without_output(self, runner):
        result = runner.invoke(app, ['generate', '--source', 'api.yaml'])

        assert result.exit_code == 1
        assert 'must be used together' in result.stdout

    @patch('contractgen.cli.get_config')
    def test_configuration_error(self, mock_get_config, runner):
        mock_get_config.side_effect = ConfigurationError('No configuration found')

        result = runner.invoke(app, ['generate'])

        assert result.exit_code == 1
        assert 'No configuration found' in result.stdout

    @patch('contractgen.cli.get_config')
    @patch('contractgen.cli.Codegen')
    def test_generation_error(self, mock_codegen_class, mock_get_config, runner, sample_config):
        mock_get_config.return_value = sample_config
        mock_codegen_class.return_value.generate.side_effect = InvalidEnumValueError(
            'Kind', 1, None
        )

        result = runner.invoke(app, ['generate'])

        assert result.exit_code == 1
        assert "'Kind'" in result.stdout

    def test_end_to_end(self, runner, tmp_path):
        spec_file = tmp_path / 'openapi.yaml'
        spec_file.write_text(get_spec_as_yaml(PETSTORE_SPEC))
        output = tmp_path / 'generated'

        result = runner.invoke(
            app, ['generate', '-s', str(spec_file), '-o', str(output), '--verbose']
        )

        assert result.exit_code == 0
        assert (output / 'models' / 'Pet.ts').exists()
        assert (output / 'routes' / 'pets-routes.ts').exists()


class TestVersionCommand:
    def test_version(self, runner):
        result = runner.invoke(app, ['version'])

        assert result.exit_code == 0
        assert 'contractgen version:' in result.stdout
