"""
Unit tests for verbose logging functionality in GitHubDirectoryDownloader.
"""

import logging
from unittest.mock import patch

from ghdir.interfaces.api import GitHubDirectoryDownloader
from ghdir.models import DownloadConfig


class TestVerboseLogging:
    """Test cases for verbose logging functionality."""

    def test_default_initialization(self):
        """Verbose is off unless requested."""
        downloader = GitHubDirectoryDownloader(DownloadConfig())
        assert downloader.verbose is False

    def test_verbose_initialization(self):
        downloader = GitHubDirectoryDownloader(verbose=True)
        assert downloader.verbose is True
        assert downloader.config.verbose is True

    def test_verbose_from_config(self):
        downloader = GitHubDirectoryDownloader(DownloadConfig(verbose=True))
        assert downloader.verbose is True

    def test_verbose_with_auth_token(self):
        """Verbose mode and an explicit token can be combined."""
        downloader = GitHubDirectoryDownloader(auth_token="test_token", verbose=True)
        assert downloader.verbose is True
        assert downloader.auth_token == "test_token"
        assert downloader.config.token == "test_token"

    @patch('ghdir.interfaces.api.logger')
    def test_logger_level_verbose_true(self, mock_logger):
        """Logger level is DEBUG when verbose=True."""
        GitHubDirectoryDownloader(DownloadConfig(), verbose=True)
        mock_logger.setLevel.assert_called_with(logging.DEBUG)

    @patch('ghdir.interfaces.api.logger')
    def test_logger_level_verbose_false(self, mock_logger):
        """Logger level is INFO when verbose=False."""
        GitHubDirectoryDownloader(DownloadConfig(), verbose=False)
        mock_logger.setLevel.assert_called_with(logging.INFO)

    @patch('ghdir.interfaces.api.logger')
    def test_set_verbose_method_enable(self, mock_logger):
        downloader = GitHubDirectoryDownloader(DownloadConfig(), verbose=False)
        downloader.set_verbose(True)

        assert downloader.verbose is True
        # Once in __init__, once in set_verbose
        assert mock_logger.setLevel.call_count >= 2
        mock_logger.setLevel.assert_called_with(logging.DEBUG)

    @patch('ghdir.interfaces.api.logger')
    def test_set_verbose_method_disable(self, mock_logger):
        downloader = GitHubDirectoryDownloader(DownloadConfig(), verbose=True)
        downloader.set_verbose(False)

        assert downloader.verbose is False
        assert downloader.config.verbose is False
        mock_logger.setLevel.assert_called_with(logging.INFO)

    def test_verbose_mode_toggle(self):
        downloader = GitHubDirectoryDownloader(DownloadConfig())

        downloader.set_verbose(True)
        assert downloader.verbose is True

        downloader.set_verbose(False)
        assert downloader.verbose is False
