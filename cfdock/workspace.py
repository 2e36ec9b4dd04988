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

'''Files and directories shared between deployment steps.'''

import jmespath
import os
import shlex
import yaml

from cfdock import constants


class MissingStateError(Exception):
    pass


def path_expression(path):
    """Translate a bosh style variable path into a JMESPath expression.

    '/director_ssl/ca' becomes '"director_ssl"."ca"' and
    '/stemcells/alias=default/version' becomes
    '"stemcells"[?alias=='default'] | [0]."version"'.
    """
    expr = ''
    for segment in path.strip('/').split('/'):
        if '=' in segment:
            key, value = segment.split('=', 1)
            expr += "[?%s=='%s'] | [0]" % (key, value)
        else:
            if expr:
                expr += '.'
            expr += '"%s"' % segment
    return expr


def lookup(filename, path):
    """Return the value at a bosh style path in a YAML file.

    :raises MissingStateError: if the file does not exist.
    :returns: the value, or None when the path is absent.
    """
    if not os.path.isfile(filename):
        raise MissingStateError('%s not found' % filename)
    with open(filename, 'r') as f:
        data = yaml.safe_load(f) or {}
    return jmespath.search(path_expression(path), data)


class Workspace(object):

    def __init__(self, root, log=None):
        self.root = root
        self.log = log
        self.state_dir = os.path.join(root, 'state')
        self.creds_dir = os.path.join(root, 'creds')
        self.bosh_deployment = os.path.join(root, 'bosh-deployment')
        self.cf_deployment = os.path.join(root, 'cf-deployment')

        self.director_state = os.path.join(self.state_dir,
                                           'director-state.json')
        self.cloud_config = os.path.join(self.state_dir, 'cloud-config.yml')
        self.env_file = os.path.join(self.state_dir, 'bosh-env.sh')
        self.ca_cert = os.path.join(self.state_dir, 'director-ca.crt')
        self.info_file = os.path.join(self.state_dir, 'cf-info.txt')
        self.director_creds = os.path.join(self.creds_dir,
                                           'director-creds.yml')
        self.cf_creds = os.path.join(self.creds_dir, 'cf-creds.yml')

    def ensure(self):
        for d in (self.state_dir, self.creds_dir):
            os.makedirs(d, exist_ok=True)

    def has_env(self):
        return os.path.isfile(self.env_file)

    def has_director_state(self):
        return os.path.isfile(self.director_state)

    def director_secret(self, path):
        return lookup(self.director_creds, path)

    def cf_secret(self, path):
        return lookup(self.cf_creds, path)

    def director_env(self, director_ip):
        """Environment variables targeting the deployed director.

        :raises MissingStateError: if the director was never deployed.
        """
        try:
            secret = self.director_secret('/admin_password')
            ca = self.director_secret('/director_ssl/ca')
        except MissingStateError:
            raise MissingStateError(
                'Director credentials not found at %s, deploy the director '
                'first' % self.director_creds)
        return {
            'BOSH_CLIENT': constants.ADMIN_USER,
            'BOSH_CLIENT_SECRET': secret or '',
            'BOSH_CA_CERT': ca or '',
            'BOSH_ENVIRONMENT': director_ip,
            'BOSH_NON_INTERACTIVE': 'true',
        }

    def write_env_file(self, env):
        self._write(self.env_file, export_lines(env), mode=0o600)
        return self.env_file

    def write_ca_cert(self, ca):
        self._write(self.ca_cert, ca)
        return self.ca_cert

    def write_cloud_config(self, config):
        self._write(self.cloud_config,
                    yaml.safe_dump(config, default_flow_style=False,
                                   sort_keys=False))
        return self.cloud_config

    def write_info(self, text):
        self._write(self.info_file, text)
        return self.info_file

    def stemcell(self):
        """Operating system and version of the cf-deployment stemcell."""
        manifest = os.path.join(self.cf_deployment, 'cf-deployment.yml')
        return (lookup(manifest, '/stemcells/alias=default/os'),
                lookup(manifest, '/stemcells/alias=default/version'))

    def _write(self, filename, content, mode=None):
        if self.log:
            self.log.debug('Writing %s' % filename)
        with open(filename, 'w') as f:
            f.write(content)
        if mode is not None:
            os.chmod(filename, mode)


def export_lines(env):
    return ''.join('export %s=%s\n' % (k, shlex.quote(str(v)))
                   for k, v in env.items())
