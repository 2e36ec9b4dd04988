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

import ipaddress
import os

from cfdock.builder import base
from cfdock import constants
from cfdock import runner
from cfdock.utils import common
from cfdock.utils import installer
from cfdock import workspace


def _vm_type(name, cpus, memory, ephemeral_disk):
    return {
        'name': name,
        'cloud_properties': {
            'cpus': cpus,
            'memory': memory,
            'ephemeral_disk': ephemeral_disk,
        },
    }


def cloud_config(settings):
    """Cloud config sizing the platform VMs for the Docker CPI.

    :param dict settings: Deployment settings, see load_settings.
    :rtype: dict
    """
    network = ipaddress.ip_network(settings['network_cidr'], strict=False)
    first = network.network_address
    return {
        'azs': [{'name': 'z1', 'cloud_properties': {}}],
        'vm_types': [
            _vm_type('minimal', 1, 2048, 10240),
            _vm_type('small', 2, 4096, 20480),
            _vm_type('default', 2, 4096, 20480),
            _vm_type('small-highmem', 2, 8192, 20480),
        ],
        'vm_extensions': [
            {'name': '50GB_ephemeral_disk',
             'cloud_properties': {'ephemeral_disk': 51200}},
            {'name': '100GB_ephemeral_disk',
             'cloud_properties': {'ephemeral_disk': 102400}},
            {'name': 'cf-router-network-properties',
             'cloud_properties': {}},
            {'name': 'cf-tcp-router-network-properties',
             'cloud_properties': {}},
            {'name': 'diego-ssh-proxy-network-properties',
             'cloud_properties': {}},
        ],
        'disk_types': [
            {'name': 'default', 'disk_size': 10240},
            {'name': '1GB', 'disk_size': 1024},
            {'name': '5GB', 'disk_size': 5120},
            {'name': '10GB', 'disk_size': 10240},
            {'name': '50GB', 'disk_size': 51200},
            {'name': '100GB', 'disk_size': 102400},
        ],
        'networks': [{
            'name': 'default',
            'type': 'manual',
            'subnets': [{
                'range': settings['network_cidr'],
                'gateway': settings['network_gw'],
                'azs': ['z1'],
                'reserved': ['%s - %s' % (settings['network_gw'],
                                          first + 10)],
                'static': ['%s - %s' % (first + 11, first + 100)],
                'dns': list(constants.DNS_SERVERS),
                'cloud_properties': {'name': settings['network_name']},
            }],
        }],
        'compilation': {
            'workers': 4,
            'reuse_compilation_vms': True,
            'az': 'z1',
            'vm_type': 'small',
            'network': 'default',
        },
    }


class DirectorBuilder(base.BaseBuilder):

    def __init__(self, settings, log=None, bosh=None, docker=None, cf=None,
                 git=None, platform=None,
                 ready_attempts=constants.READY_ATTEMPTS,
                 ready_interval=constants.READY_INTERVAL):
        super(DirectorBuilder, self).__init__(settings, log, bosh, docker,
                                              cf, git)
        self.platform = platform
        self.ready_attempts = ready_attempts
        self.ready_interval = ready_interval

    def apply(self):
        self.check_prerequisites()
        self.setup_workspace()
        self.setup_network()
        self.deploy_director()
        self.update_cloud_config()
        self.update_runtime_config()
        self.upload_stemcell()

    def check_prerequisites(self):
        self.log.info('Checking prerequisites...')

        if not self.docker.installed():
            raise base.PrerequisiteError(
                'Docker is not installed. Please install Docker first.')
        if not self.docker.is_running():
            raise base.PrerequisiteError(
                "Docker daemon is not running or you don't have permission. "
                'Try: sudo usermod -aG docker $USER && newgrp docker')

        if not self.bosh.installed():
            self.log.warning('BOSH CLI not found. Installing...')
            installer.install_bosh_cli(self.platform, log=self.log)
        if not self.cf.installed():
            self.log.warning('CF CLI not found. Installing...')
            installer.install_cf_cli(self.platform, log=self.log)

        total_mem_gb = common.total_memory_gb()
        if total_mem_gb < constants.MIN_MEMORY_GB:
            self.log.warning('Less than %sGB RAM detected (%s GB). '
                             'Deployment may be slow or fail.' %
                             (constants.MIN_MEMORY_GB, total_mem_gb))
        else:
            self.log.info('Memory check passed: %s GB detected.' %
                          total_mem_gb)
        self.log.info('Prerequisites check passed')

    def setup_workspace(self):
        self.log.info('Setting up workspace at %s...' % self.workspace.root)
        self.workspace.ensure()
        for url, path in (
                (constants.BOSH_DEPLOYMENT_REPO,
                 self.workspace.bosh_deployment),
                (constants.CF_DEPLOYMENT_REPO,
                 self.workspace.cf_deployment)):
            if not os.path.isdir(path):
                self.log.info('Cloning %s...' % os.path.basename(path))
                self.git.clone(url, path)
            else:
                self.log.info('Updating %s...' % os.path.basename(path))
                self.git.pull(path)
        self.log.info('Workspace ready')

    def setup_network(self):
        name = self.settings['network_name']
        self.log.info("Setting up Docker network '%s'..." % name)

        # Recreate an idle network, keep one that containers are using
        if self.docker.network_exists(name):
            self.log.info('Network already exists, checking if it can be '
                          'recreated...')
            containers = self.docker.network_containers(name)
            if containers:
                self.log.warning('Network has active containers: %s' %
                                 ' '.join(containers))
                self.log.warning('Using existing network...')
                return
            self.docker.remove_network(name)

        self.docker.create_network(name,
                                   self.settings['network_cidr'],
                                   self.settings['network_gw'],
                                   self.settings['bridge_name'])
        self.log.info('Docker network created')

    def ensure_docker_socket(self):
        docker_host = self.settings['docker_host']
        if common.is_darwin(self.platform):
            return
        if not docker_host.startswith('unix://'):
            return
        sock = docker_host[len('unix://'):]
        if os.path.exists(sock) and not os.access(sock, os.W_OK):
            self.log.warning('Docker socket not writable. '
                             'Attempting to fix...')
            cmd = ['sudo', 'chmod', 'a+rw', sock]
            cmd_stdout, cmd_stderr, returncode = runner.BaseRunner.execute(
                cmd, self.log)
            if returncode != 0:
                raise runner.CommandError(cmd, returncode, cmd_stderr)

    def deploy_director(self):
        self.log.info('Deploying BOSH Director with Docker CPI...')
        self.ensure_docker_socket()
        self.bosh.create_env(**self.director_manifest_args())
        self.log.info('BOSH Director deployed at %s' %
                      self.settings['director_ip'])
        self.configure_env()

    def configure_env(self):
        self.log.info('Configuring BOSH environment...')
        env = self.load_director_env()
        self.workspace.write_env_file(env)
        ca_cert = self.workspace.write_ca_cert(env['BOSH_CA_CERT'])
        self.bosh.alias_env(self.settings['director_ip'], ca_cert)

        self.log.info('Waiting for Director to be ready...')
        self.bosh.wait_until_ready(self.ready_attempts, self.ready_interval)
        self.log.info('BOSH environment configured')

    def update_cloud_config(self):
        self.log.info('Updating cloud config...')
        self.load_director_env()
        path = self.workspace.write_cloud_config(cloud_config(self.settings))
        self.bosh.update_cloud_config(path)
        self.log.info('Cloud config updated')

    def update_runtime_config(self):
        self.log.info('Updating runtime config for BOSH DNS...')
        self.load_director_env()
        self.bosh.update_runtime_config(
            os.path.join(self.workspace.bosh_deployment, 'runtime-configs',
                         'dns.yml'), 'dns')
        self.log.info('Runtime config updated')

    def upload_stemcell(self):
        self.log.info('Uploading stemcell...')
        self.load_director_env()

        stemcell_os, stemcell_version = self.workspace.stemcell()
        if stemcell_os and stemcell_version:
            self.log.info('Required stemcell: %s version %s' %
                          (stemcell_os, stemcell_version))
            # Docker CPI runs warden stemcells
            url = constants.STEMCELL_URL.format(os=stemcell_os,
                                                version=stemcell_version)
            returncode = self.bosh.upload_stemcell(url)
        else:
            self.log.warning('No default stemcell found in cf-deployment')
            returncode = 1

        if returncode != 0:
            self.log.warning('Could not upload warden stemcell, trying the '
                             'latest jammy stemcell...')
            if self.bosh.upload_stemcell(
                    constants.FALLBACK_STEMCELL_URL) != 0:
                self.log.warning('Fallback stemcell upload failed')
                return
        self.log.info('Stemcell uploaded')

    def destroy(self):
        if self.workspace.has_env():
            try:
                self.load_director_env()
            except workspace.MissingStateError as e:
                self.log.warning(e)
            else:
                self.bosh.delete_deployment()

        if self.workspace.has_director_state():
            self.log.info('Deleting BOSH Director...')
            self.bosh.delete_env(**self.director_manifest_args())

        self.log.info('Cleaning up Docker containers...')
        self.docker.remove_containers(
            [n for n in self.docker.container_names()
             if n.startswith(constants.CONTAINER_PREFIXES)])

        self.log.info('Removing Docker network...')
        self.docker.remove_network(self.settings['network_name'])
        self.log.info('Cleanup complete')
