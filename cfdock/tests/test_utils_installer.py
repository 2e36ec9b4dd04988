# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import os
from unittest import mock

from cfdock import runner
from cfdock.tests import base
from cfdock.utils import installer


class TestUtilsInstaller(base.TestCase):

    def setUp(self):
        super(TestUtilsInstaller, self).setUp()
        self.tempdir = self.make_tempdir()
        patcher = mock.patch('tempfile.gettempdir',
                             return_value=self.tempdir)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_urls(self):
        self.assertEqual(
            'https://github.com/cloudfoundry/bosh-cli/releases/download/'
            'v7.8.6/bosh-cli-7.8.6-linux-amd64',
            installer.bosh_cli_url('linux'))
        self.assertEqual(
            'https://github.com/cloudfoundry/bosh-cli/releases/download/'
            'v7.8.6/bosh-cli-7.8.6-darwin-amd64',
            installer.bosh_cli_url('darwin'))
        self.assertIn('release=macosx64-binary',
                      installer.cf_cli_url('darwin'))
        self.assertIn('release=linux64-binary',
                      installer.cf_cli_url('linux'))

    @mock.patch('os.chmod')
    @mock.patch('cfdock.runner.BaseRunner.execute',
                return_value=('', '', 0))
    def test_install_bosh_cli(self, execute, mock_chmod):
        installer.install_bosh_cli('linux')
        tmp = os.path.join(self.tempdir, 'bosh')
        execute.assert_has_calls([
            mock.call(['curl', '-sL', installer.bosh_cli_url('linux'),
                       '-o', tmp], mock.ANY),
            mock.call(['sudo', 'mv', tmp, '/usr/local/bin/bosh'], mock.ANY),
        ])
        mock_chmod.assert_called_once_with(tmp, 0o755)

    @mock.patch('cfdock.runner.BaseRunner.execute',
                return_value=('', '404', 22))
    def test_install_bosh_cli_download_failed(self, execute):
        self.assertRaises(runner.CommandError, installer.install_bosh_cli,
                          'linux')

    @mock.patch('cfdock.runner.BaseRunner.execute',
                return_value=('', '', 0))
    def test_install_cf_cli(self, execute):
        binary = os.path.join(self.tempdir, 'cf8')
        open(binary, 'w').close()
        self.assertTrue(installer.install_cf_cli('linux'))
        execute.assert_called_with(
            ['sudo', 'mv', binary, '/usr/local/bin/cf'], mock.ANY)

    @mock.patch('cfdock.runner.BaseRunner.execute',
                return_value=('', '', 0))
    def test_install_cf_cli_no_binary(self, execute):
        self.assertFalse(installer.install_cf_cli('linux'))
        self.assertEqual(2, execute.call_count)
