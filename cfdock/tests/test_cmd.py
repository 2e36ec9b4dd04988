# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

import io
import os
from testtools import matchers
from unittest import mock

from cfdock import cmd
from cfdock import runner
from cfdock.tests import base
from cfdock.utils import common


class TestCommands(base.TestCase):

    def setUp(self):
        super(TestCommands, self).setUp()
        self.tempdir = self.make_tempdir()
        self.app = mock.Mock()
        self.app.stdout = io.StringIO()
        self.app_args = mock.Mock(
            verbose_level=1, debug=False,
            log_file=os.path.join(self.tempdir, 'cfdock.log'))

    def run_command(self, command_class, argv):
        command = command_class(self.app, self.app_args)
        parser = command.get_parser('cfdock')
        parsed_args = parser.parse_args(
            argv + ['--workspace', self.tempdir, '--host-ip', '192.168.1.10'])
        return command.run(parsed_args)

    @mock.patch('cfdock.full')
    def test_full(self, full):
        full.return_value = 'API Endpoint: https://api.x'
        self.assertEqual(0, self.run_command(cmd.Full, []))
        settings = full.call_args[0][0]
        self.assertEqual(self.tempdir, settings['workspace'])
        self.assertEqual('192.168.1.10.nip.io', settings['system_domain'])
        self.assertEqual('API Endpoint: https://api.x\n',
                         self.app.stdout.getvalue())

    @mock.patch('cfdock.director')
    def test_exit_code_passed_through(self, director):
        director.side_effect = runner.CommandError(
            ['bosh', 'create-env'], 7, 'no docker')
        self.assertEqual(7, self.run_command(cmd.Director, []))

    @mock.patch('cfdock.cf')
    def test_cf_system_domain(self, cf):
        cf.return_value = 'info'
        self.run_command(cmd.Cf, ['--system-domain', 'cf.example.com'])
        self.assertEqual('cf.example.com',
                         cf.call_args[0][0]['system_domain'])

    @mock.patch('builtins.input', return_value='no')
    @mock.patch('cfdock.destroy')
    def test_destroy_aborted(self, destroy, mock_input):
        self.assertEqual(0, self.run_command(cmd.Destroy, []))
        mock_input.assert_called_once_with('Are you sure? (yes/no): ')
        destroy.assert_not_called()

    @mock.patch('builtins.input', return_value='yes')
    @mock.patch('cfdock.destroy')
    def test_destroy_confirmed(self, destroy, mock_input):
        self.assertEqual(0, self.run_command(cmd.Destroy, []))
        destroy.assert_called_once_with(mock.ANY, log_level=1,
                                        log_file=mock.ANY)

    @mock.patch('builtins.input')
    @mock.patch('cfdock.destroy')
    def test_destroy_yes(self, destroy, mock_input):
        self.run_command(cmd.Destroy, ['--yes'])
        mock_input.assert_not_called()
        destroy.assert_called_once_with(mock.ANY, log_level=1,
                                        log_file=mock.ANY)

    @mock.patch('builtins.input', return_value='')
    @mock.patch('cfdock.recreate')
    def test_recreate_aborted(self, recreate, mock_input):
        self.assertEqual(0, self.run_command(cmd.Recreate, []))
        recreate.assert_not_called()

    def test_password_not_found(self):
        self.assertEqual(0, self.run_command(cmd.Password, ['director']))
        self.assertEqual('Not found\n', self.app.stdout.getvalue())

    def test_password(self):
        self.write_cf_creds(self.tempdir)
        self.run_command(cmd.Password, [])
        self.assertEqual('cfpass\n', self.app.stdout.getvalue())

    def test_env(self):
        self.write_director_creds(self.tempdir)
        self.run_command(cmd.Env, [])
        output = self.app.stdout.getvalue()
        self.assertIn('export BOSH_CLIENT=admin\n', output)
        self.assertIn('export BOSH_ENVIRONMENT=10.245.0.2\n', output)

    @mock.patch('cfdock.vms')
    @mock.patch('cfdock.ssh')
    def test_ssh_without_instance(self, ssh, vms):
        self.assertEqual(1, self.run_command(cmd.Ssh, []))
        ssh.assert_not_called()
        vms.assert_called_once_with(mock.ANY, deployment=True, log_level=1,
                                    log_file=mock.ANY)
        self.assertIn('router/0', self.app.stdout.getvalue())

    @mock.patch('cfdock.logs', return_value=0)
    def test_logs(self, logs):
        self.assertEqual(0, self.run_command(cmd.Logs, ['router/0']))
        logs.assert_called_once_with(mock.ANY, 'router/0', log_level=1,
                                     log_file=mock.ANY)

    @mock.patch('cfdock.tasks')
    @mock.patch('cfdock.cancel_task')
    def test_cancel_task_without_id(self, cancel_task, tasks):
        self.assertEqual(1, self.run_command(cmd.CancelTask, []))
        cancel_task.assert_not_called()
        tasks.assert_called_once_with(mock.ANY, log_level=1,
                                      log_file=mock.ANY)

    @mock.patch('cfdock.setup_space')
    def test_setup_space(self, setup_space):
        self.run_command(cmd.SetupSpace, ['--org', 'o', '--space', 's'])
        setup_space.assert_called_once_with(mock.ANY, org='o', space='s',
                                            log_level=1, log_file=mock.ANY)


@mock.patch.dict('os.environ', {}, clear=True)
@mock.patch('cfdock.utils.common.detect_host_ip', return_value=None)
class TestCommandsWithoutHostIp(base.TestCase):

    def setUp(self):
        super(TestCommandsWithoutHostIp, self).setUp()
        self.tempdir = self.make_tempdir()
        self.app = mock.Mock()
        self.app.stdout = io.StringIO()
        self.app_args = mock.Mock(
            verbose_level=1, debug=False,
            log_file=os.path.join(self.tempdir, 'cfdock.log'))

    def parse(self, command, argv):
        parser = command.get_parser('cfdock')
        return parser.parse_args(argv + ['--workspace', self.tempdir])

    def test_password(self, mock_detect):
        self.write_cf_creds(self.tempdir)
        command = cmd.Password(self.app, self.app_args)
        self.assertEqual(0, command.run(self.parse(command, ['cf'])))
        self.assertEqual('cfpass\n', self.app.stdout.getvalue())

    def test_password_not_found(self, mock_detect):
        command = cmd.Password(self.app, self.app_args)
        self.assertEqual(0, command.run(self.parse(command, ['director'])))
        self.assertEqual('Not found\n', self.app.stdout.getvalue())

    @mock.patch('cfdock.status')
    def test_status(self, status, mock_detect):
        status.return_value = [('network', 'cf-network', 'missing')]
        command = cmd.Status(self.app, self.app_args)
        columns, rows = command.take_action(self.parse(command, []))
        self.assertEqual(('component', 'name', 'state'), columns)
        self.assertThat(rows, matchers.Contains(
            ('network', 'cf-network', 'missing')))
        settings = status.call_args[0][0]
        self.assertIsNone(settings['host_ip'])
        self.assertIsNone(settings['system_domain'])

    def test_info_needs_system_domain(self, mock_detect):
        self.write_director_creds(self.tempdir)
        command = cmd.Info(self.app, self.app_args)
        parsed_args = self.parse(command, [])
        command.log = mock.Mock()
        e = self.assertRaises(common.ConfigError, command.take_action,
                              parsed_args)
        self.assertThat(str(e), matchers.Contains('SYSTEM_DOMAIN'))
