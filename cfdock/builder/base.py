#   Licensed under the Apache License, Version 2.0 (the "License"); you may
#   not use this file except in compliance with the License. You may obtain
#   a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
#   WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
#   License for the specific language governing permissions and limitations
#   under the License.
#

import os

from cfdock import constants
from cfdock import runner
from cfdock.utils import common
from cfdock import workspace


class PrerequisiteError(Exception):
    pass


class BaseBuilder(object):

    def __init__(self, settings, log=None, bosh=None, docker=None, cf=None,
                 git=None):
        self.settings = settings
        # Leverage pre-configured logger
        self.log = log or common.configure_logging(__name__)
        self.workspace = workspace.Workspace(settings['workspace'],
                                             log=self.log)
        self.bosh = bosh or runner.BoshRunner(
            environment=settings['environment'],
            deployment=settings['deployment'],
            log=self.log)
        self.docker = docker or runner.DockerRunner(log=self.log)
        self.cf = cf or runner.CfRunner(log=self.log)
        self.git = git or runner.GitRunner(log=self.log)

    def director_env(self):
        return self.workspace.director_env(self.settings['director_ip'])

    def load_director_env(self):
        '''Target the deployed director with every following bosh call.'''
        self.bosh.env = self.director_env()
        return self.bosh.env

    def director_manifest_args(self):
        """Manifest, state and variables shared by create-env and delete-env.

        :returns: keyword arguments for BoshRunner.create_env/delete_env
        :rtype: dict
        """
        ops_files = [os.path.join(self.workspace.bosh_deployment, o)
                     for o in constants.DIRECTOR_OPS_FILES]
        variables = {
            'director_name': self.settings['director_name'],
            'internal_cidr': self.settings['network_cidr'],
            'internal_gw': self.settings['network_gw'],
            'internal_ip': self.settings['director_ip'],
            'docker_host': self.settings['docker_host'],
            'network': self.settings['network_name'],
        }
        return {
            'manifest': os.path.join(self.workspace.bosh_deployment,
                                     'bosh.yml'),
            'state': self.workspace.director_state,
            'vars_store': self.workspace.director_creds,
            'ops_files': ops_files,
            'variables': variables,
        }

    def credhub_env(self):
        director_ip = self.settings['director_ip']
        return {
            'CREDHUB_SERVER': 'https://%s:%s' % (director_ip,
                                                 constants.CREDHUB_PORT),
            'CREDHUB_CLIENT': constants.CREDHUB_CLIENT,
            'CREDHUB_SECRET': self.workspace.director_secret(
                '/credhub_admin_client_secret') or '',
            'CREDHUB_CA_CERT': self.workspace.director_secret(
                '/credhub_tls/ca') or '',
        }

    def status(self):
        """Collect the state of every deployed component.

        :returns: (component, name, state) rows
        :rtype: list
        """
        network = self.settings['network_name']
        director_ip = self.settings['director_ip']
        rows = []

        if self.docker.network_exists(network):
            rows.append(('network', network, 'present'))
        else:
            rows.append(('network', network, 'missing'))

        if not self.workspace.has_env():
            rows.append(('director', director_ip, 'unknown'))
        else:
            try:
                self.load_director_env()
                ready = self.bosh.is_ready()
            except workspace.MissingStateError as e:
                self.log.warning(e)
                ready = False
            if ready:
                rows.append(('director', director_ip, 'running'))
                for name in self.bosh.deployments():
                    rows.append(('deployment', name, 'deployed'))
                for instance, state in self.bosh.instances():
                    rows.append(('vm', instance, state))
            else:
                rows.append(('director', director_ip, 'unreachable'))

        for name, state in self.docker.network_members(network):
            rows.append(('container', name, state))
        return rows
