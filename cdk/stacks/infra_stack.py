from aws_cdk import (
    Stack,
    RemovalPolicy,
    CfnOutput,
    aws_codebuild as codebuild,
    aws_codecommit as codecommit,
    aws_codedeploy as codedeploy,
    aws_codepipeline as codepipeline,
    aws_codepipeline_actions as codepipeline_actions,
    aws_ec2 as ec2,
    aws_s3 as s3,
    aws_ssm as ssm,
)
from constructs import Construct
import logging

logger = logging.getLogger(__name__)

VPC_CIDR = "10.0.0.0/16"
PARAMETER_NAME = "/test/c"


def build_user_data(parameter_name: str, region: str, env_file: str = "/etc/environment") -> str:
    """
    Boot script for the app instances.

    Fetches the decrypted parameter into env_file, then installs Node.js.
    Exits non-zero if the parameter cannot be read or is empty. The value
    is written quoted and never evaluated by the shell.
    """
    return f"""#!/bin/bash
set -euo pipefail

VALUE=$(aws ssm get-parameter --name '{parameter_name}' --with-decryption --query 'Parameter.Value' --output text --region {region})
if [ -z "$VALUE" ]; then
  echo "Parameter {parameter_name} is empty" >&2
  exit 1
fi
printf 'MY_ENV_VARIABLE="%s"\\n' "$VALUE" >> {env_file}
export MY_ENV_VARIABLE="$VALUE"

yum install -y nodejs
node -e "console.log('Running Node.js ' + process.version)"
"""


class InfraStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.instance_type = self.node.try_get_context("instanceType")
        self.target_region = self.node.try_get_context("region")
        logger.info(f"Defining {construct_id}: instanceType={self.instance_type} region={self.target_region}")

        # ─────────────────────────────────────────────
        # 1. S3 Bucket
        #    Destroyed with the stack, objects included
        # ─────────────────────────────────────────────
        self.bucket = s3.Bucket(
            self,
            "SampleBucket",
            bucket_name="frourio-cdk-starter-sample-bucket",
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            encryption=s3.BucketEncryption.S3_MANAGED,
            removal_policy=RemovalPolicy.DESTROY,  # not for production data
            auto_delete_objects=True,
        )

        # ─────────────────────────────────────────────
        # 2. VPC + Security Group
        # ─────────────────────────────────────────────
        self.vpc = ec2.Vpc(
            self,
            "SampleVpc",
            ip_addresses=ec2.IpAddresses.cidr(VPC_CIDR),
            vpc_name="cdk-sample-vpc",
        )

        self.security_group = ec2.SecurityGroup(
            self,
            "SampleSecurityGroup",
            vpc=self.vpc,
            security_group_name="cdk-vpc-ec2-security-group",
        )
        self.security_group.add_ingress_rule(ec2.Peer.any_ipv4(), ec2.Port.tcp(22), "allow SSH")
        self.security_group.add_ingress_rule(ec2.Peer.any_ipv4(), ec2.Port.tcp(80), "allow HTTP")

        # ─────────────────────────────────────────────
        # 3. Reference the SecureString parameter
        #    (created outside this stack)
        # ─────────────────────────────────────────────
        self.parameter = ssm.StringParameter.from_secure_string_parameter_attributes(
            self,
            "SampleParam",
            parameter_name=PARAMETER_NAME,
        )

        # ─────────────────────────────────────────────
        # 4. EC2 Instances
        #    One public, one private with NAT egress
        # ─────────────────────────────────────────────
        instance1 = self._create_instance(
            "SampleInstance6",
            "cdk-vpc-ec2-instance1",
            ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC),
        )
        instance2 = self._create_instance(
            "SampleInstance15",
            "cdk-vpc-ec2-instance2",
            ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS),
        )
        self.instances = [instance1, instance2]

        for instance in self.instances:
            self.parameter.grant_read(instance)

        # ─────────────────────────────────────────────
        # 5. CodeCommit → CodeBuild → CodeDeploy
        # ─────────────────────────────────────────────
        repository = codecommit.Repository(
            self,
            "Repository",
            repository_name="NodeJsAppRepo",
        )

        # buildspec.yml is taken from the source bundle
        build_project = codebuild.PipelineProject(self, "BuildProject")

        application = codedeploy.ServerApplication(
            self,
            "Application",
            application_name="NodeJsApp",
        )

        # Tag values are instance ids, so replacing an instance means redefining the group
        self.deployment_group = codedeploy.ServerDeploymentGroup(
            self,
            "DeploymentGroup",
            application=application,
            ec2_instance_tags=codedeploy.InstanceTagSet(
                {"Name": [instance1.instance_id, instance2.instance_id]},
            ),
            deployment_group_name="NodeJsDeploymentGroup",
        )

        # ─────────────────────────────────────────────
        # 6. CodePipeline
        #    SourceOutput → Build → BuildOutput → Deploy
        # ─────────────────────────────────────────────
        source_output = codepipeline.Artifact("SourceOutput")
        build_output = codepipeline.Artifact("BuildOutput")

        self.pipeline = codepipeline.Pipeline(
            self,
            "Pipeline",
            stages=[
                codepipeline.StageProps(
                    stage_name="Source",
                    actions=[
                        codepipeline_actions.CodeCommitSourceAction(
                            action_name="Source",
                            repository=repository,
                            output=source_output,
                        ),
                    ],
                ),
                codepipeline.StageProps(
                    stage_name="Build",
                    actions=[
                        codepipeline_actions.CodeBuildAction(
                            action_name="Build",
                            project=build_project,
                            input=source_output,
                            outputs=[build_output],
                        ),
                    ],
                ),
                codepipeline.StageProps(
                    stage_name="Deploy",
                    actions=[
                        codepipeline_actions.CodeDeployServerDeployAction(
                            action_name="Deploy",
                            deployment_group=self.deployment_group,
                            input=build_output,
                        ),
                    ],
                ),
            ],
        )

        # ─────────────────────────────────────────────
        # 7. Outputs
        # ─────────────────────────────────────────────
        CfnOutput(
            self,
            "S3",
            value=self.bucket.bucket_name,
            description="Sample bucket name",
        )

        CfnOutput(
            self,
            "VPC",
            value=self.vpc.vpc_id,
            description="VPC id",
        )

        CfnOutput(
            self,
            "Security Group",
            value=self.security_group.security_group_id,
            description="Security group attached to both instances",
        )

        CfnOutput(
            self,
            "EC2Instance1",
            value=instance1.instance_id,
            description="Instance in the public subnet",
        )

        CfnOutput(
            self,
            "EC2Instance2",
            value=instance2.instance_id,
            description="Instance in the private subnet",
        )

    def _create_instance(self, construct_id: str, name: str, subnets: ec2.SubnetSelection) -> ec2.Instance:
        return ec2.Instance(
            self,
            construct_id,
            vpc=self.vpc,
            vpc_subnets=subnets,
            instance_type=ec2.InstanceType(self.instance_type),
            machine_image=ec2.MachineImage.latest_amazon_linux2023(),
            security_group=self.security_group,
            instance_name=name,
            user_data=ec2.UserData.custom(
                build_user_data(self.parameter.parameter_name, self.target_region)
            ),
            ssm_session_permissions=True,
        )
