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

import collections
import logging
import os
import socket
from unittest import mock

from cfdock.tests import base
from cfdock.utils import common

snicaddr = collections.namedtuple('snicaddr', 'family address')


class TestUtilsCommonLogging(base.TestCase):

    def test_levels(self):
        self.assertEqual(logging.DEBUG,
                         common.configure_logging('cfdock.t1', 3).level)
        self.assertEqual(logging.INFO,
                         common.configure_logging('cfdock.t2', 2).level)
        self.assertEqual(logging.WARNING,
                         common.configure_logging('cfdock.t3', 1).level)

    @mock.patch('os.getuid', return_value=1000)
    def test_from_args(self, mock_getuid):
        app_args = mock.Mock(verbose_level=1, debug=True, log_file=None)
        log, log_file, log_level = common.configure_logging_from_args(
            'cfdock.t4', app_args)
        self.assertEqual(4, log_level)
        self.assertIsNone(log_file)
        self.assertEqual(logging.DEBUG, log.level)

    @mock.patch('os.getuid', return_value=0)
    def test_from_args_root(self, mock_getuid):
        log_file = os.path.join(self.make_tempdir(), 'cfdock.log')
        app_args = mock.Mock(verbose_level=2, debug=False, log_file=log_file)
        log, actual, log_level = common.configure_logging_from_args(
            'cfdock.t5', app_args)
        self.assertEqual(log_file, actual)
        self.assertFalse(log.propagate)
        for h in log.handlers:
            h.close()


class TestUtilsCommonHost(base.TestCase):

    @mock.patch('psutil.net_if_addrs')
    def test_detect_host_ip_linux(self, mock_addrs):
        mock_addrs.return_value = collections.OrderedDict([
            ('lo', [snicaddr(socket.AF_INET, '127.0.0.1')]),
            ('docker0', [snicaddr(socket.AF_INET, '172.17.0.1')]),
            ('eth0', [snicaddr(socket.AF_INET6, 'fe80::1'),
                      snicaddr(socket.AF_INET, '192.168.1.10')]),
        ])
        self.assertEqual('192.168.1.10', common.detect_host_ip('linux'))

    @mock.patch('psutil.net_if_addrs')
    def test_detect_host_ip_darwin(self, mock_addrs):
        mock_addrs.return_value = {
            'utun0': [snicaddr(socket.AF_INET, '10.8.0.2')],
            'en0': [snicaddr(socket.AF_INET, '192.168.1.20')],
        }
        self.assertEqual('192.168.1.20', common.detect_host_ip('darwin'))

    @mock.patch('psutil.net_if_addrs', return_value={})
    def test_detect_host_ip_none(self, mock_addrs):
        self.assertIsNone(common.detect_host_ip('linux'))

    @mock.patch('psutil.virtual_memory')
    def test_total_memory_gb(self, mock_mem):
        mock_mem.return_value = mock.Mock(total=16 * 1024 ** 3 + 5)
        self.assertEqual(16, common.total_memory_gb())


class TestUtilsCommonSettings(base.TestCase):

    def test_defaults(self):
        settings = common.load_settings(environ={}, host_ip='192.168.1.10')
        self.assertEqual('10.245.0.2', settings['director_ip'])
        self.assertEqual('10.245.0.0/16', settings['network_cidr'])
        self.assertEqual('cf-network', settings['network_name'])
        self.assertEqual('192.168.1.10.nip.io', settings['system_domain'])
        self.assertEqual(os.path.abspath('workspace'), settings['workspace'])

    @mock.patch('cfdock.utils.common.detect_host_ip',
                return_value='10.0.0.5')
    def test_detected_host_ip(self, mock_detect):
        settings = common.load_settings(environ={})
        self.assertEqual('10.0.0.5', settings['host_ip'])
        self.assertEqual('10.0.0.5.nip.io', settings['system_domain'])

    @mock.patch('cfdock.utils.common.detect_host_ip', return_value=None)
    def test_undetectable_host_ip(self, mock_detect):
        settings = common.load_settings(environ={})
        self.assertIsNone(settings['host_ip'])
        self.assertIsNone(settings['system_domain'])

    @mock.patch('cfdock.utils.common.detect_host_ip', return_value=None)
    def test_system_domain_without_host_ip(self, mock_detect):
        settings = common.load_settings(
            environ={'SYSTEM_DOMAIN': 'cf.example.com'})
        self.assertEqual('cf.example.com', settings['system_domain'])

    def test_precedence(self):
        tempdir = self.make_tempdir()
        config_file = self.write_yaml(
            os.path.join(tempdir, 'settings.yml'),
            {'host_ip': '1.1.1.1', 'network_name': 'other-net',
             'workspace': '/from/file'})
        environ = {'HOST_IP': '2.2.2.2', 'CFDOCK_WORKSPACE': '/from/env'}

        settings = common.load_settings(config_file, environ=environ)
        self.assertEqual('2.2.2.2', settings['host_ip'])
        self.assertEqual('other-net', settings['network_name'])
        self.assertEqual('/from/env', settings['workspace'])

        settings = common.load_settings(config_file, environ=environ,
                                        host_ip='3.3.3.3', workspace=None)
        self.assertEqual('3.3.3.3', settings['host_ip'])
        self.assertEqual('3.3.3.3.nip.io', settings['system_domain'])
        self.assertEqual('/from/env', settings['workspace'])

    def test_unknown_setting_in_file(self):
        tempdir = self.make_tempdir()
        config_file = self.write_yaml(os.path.join(tempdir, 'settings.yml'),
                                      {'director_ipp': '1.2.3.4'})
        e = self.assertRaises(common.ConfigError, common.load_settings,
                              config_file, environ={}, host_ip='1.1.1.1')
        self.assertIn('director_ipp', str(e))

    def test_malformed_file(self):
        tempdir = self.make_tempdir()
        config_file = os.path.join(tempdir, 'settings.yml')
        with open(config_file, 'w') as f:
            f.write('- just\n- a list\n')
        self.assertRaises(common.ConfigError, common.load_settings,
                          config_file, environ={}, host_ip='1.1.1.1')
