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

import logging
import os
import psutil
import socket
import sys
import yaml

from cfdock import constants


class ConfigError(Exception):
    pass


DEFAULTS = {
    'director_ip': constants.DIRECTOR_IP,
    'network_cidr': constants.NETWORK_CIDR,
    'network_gw': constants.NETWORK_GW,
    'network_name': constants.NETWORK_NAME,
    'bridge_name': constants.BRIDGE_NAME,
    'director_name': constants.DIRECTOR_NAME,
    'environment': constants.ENVIRONMENT_ALIAS,
    'deployment': constants.DEPLOYMENT_NAME,
    'docker_host': constants.DOCKER_HOST,
    'workspace': constants.WORKSPACE,
    'host_ip': None,
    'system_domain': None,
}

# Environment variables honoured by load_settings, and the key they set.
ENVIRONMENT_OVERRIDES = {
    'HOST_IP': 'host_ip',
    'SYSTEM_DOMAIN': 'system_domain',
    'CFDOCK_WORKSPACE': 'workspace',
}

# Interfaces never used for the system domain.
IGNORED_INTERFACES = ('lo', 'docker0', constants.BRIDGE_NAME)


def configure_logging(name, level=3, log_file=None):
    '''Mimic oslo_log default levels and formatting for the logger. '''
    log = logging.getLogger(name)

    if level and level > 2:
        ll = logging.DEBUG
    elif level and level == 2:
        ll = logging.INFO
    else:
        ll = logging.WARNING

    log.setLevel(ll)
    if log_file and not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(ll)
        fhandler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            '%(asctime)s.%(msecs)03d %(process)d %(levelname)s '
            '%(name)s [  ] %(message)s',
            '%Y-%m-%d %H:%M:%S')
        fhandler.setLevel(ll)
        fhandler.setFormatter(formatter)
        log.addHandler(fhandler)
        log.addHandler(handler)
        log.propagate = False

    return log


def configure_logging_from_args(name, app_args):
    # takes 1, or 2 if --verbose, or 4 - 5 if --debug
    log_level = (app_args.verbose_level +
                 int(app_args.debug) * 3)

    # if executed as root log to specified file or default log file
    if os.getuid() == 0:
        log_file = app_args.log_file or constants.LOG_FILE
    else:
        log_file = app_args.log_file

    log = configure_logging(name, log_level, log_file)
    return (log, log_file, log_level)


def is_darwin(platform=None):
    return (platform or sys.platform) == 'darwin'


def detect_host_ip(platform=None):
    """Find the address the platform's system domain should resolve to.

    On macOS this is the IPv4 address of en0. Elsewhere it is the first
    IPv4 address that is neither loopback nor owned by a container bridge.

    :returns: the address, or None when nothing suitable is configured.
    :rtype: str
    """
    addrs = psutil.net_if_addrs()
    if is_darwin(platform):
        names = ['en0']
    else:
        names = [n for n in addrs if n not in IGNORED_INTERFACES]
    for name in names:
        for addr in addrs.get(name, []):
            if addr.family != socket.AF_INET:
                continue
            if addr.address.startswith('127.'):
                continue
            return addr.address
    return None


def total_memory_gb():
    return psutil.virtual_memory().total // (1024 ** 3)


def load_settings(config_file=None, environ=None, platform=None,
                  **overrides):
    """Build the deployment settings.

    Values are layered from the built-in defaults, the optional YAML
    config file, the environment and finally the keyword overrides.
    Overrides whose value is None are ignored.

    :param str config_file: Optional YAML file with settings keys.
    :param dict environ: Environment to read overrides from, defaults to
                         os.environ.
    :param str platform: Override for sys.platform.

    :returns: settings, system_domain is None when no host IP is known.
    :rtype: dict
    """
    settings = dict(DEFAULTS)
    if environ is None:
        environ = os.environ

    if config_file:
        with open(config_file, 'r') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError('Problem parsing %s: %s' % (config_file, e))
        if not isinstance(data, dict):
            raise ConfigError('%s must contain a mapping' % config_file)
        unknown = sorted(set(data) - set(DEFAULTS))
        if unknown:
            raise ConfigError('Unknown settings in %s: %s' %
                              (config_file, ', '.join(unknown)))
        settings.update(data)

    for var, key in ENVIRONMENT_OVERRIDES.items():
        if environ.get(var):
            settings[key] = environ[var]

    for k, v in overrides.items():
        if k not in DEFAULTS:
            raise ConfigError('Unknown setting: %s' % k)
        if v is not None:
            settings[k] = v

    if not settings['host_ip']:
        settings['host_ip'] = detect_host_ip(platform)
    if not settings['system_domain'] and settings['host_ip']:
        settings['system_domain'] = '%s.nip.io' % settings['host_ip']

    settings['workspace'] = os.path.abspath(settings['workspace'])
    return settings
